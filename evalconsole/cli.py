"""
Interactive CLI for the HR Evaluation Console.
Restores the last session, asks for credentials when needed and renders
the evaluation dashboard with filters and sorting.
"""

from datetime import datetime, timezone
from getpass import getpass

import pandas as pd

from evalconsole.api.app import build_manager
from evalconsole.config import MAX_TABLE_ROWS
from evalconsole.dashboard import build_dashboard, load_records
from evalconsole.errors import ConsoleApiError, user_message
from evalconsole.filters import parse_filter_state, parse_sort_state
from evalconsole.models import DashboardView, FilterState, SortState
from evalconsole.rbac import capabilities, menu_items, resolve_navigation

TABLE_COLUMNS = [
    "id", "employee_name", "evaluator_name", "period_name",
    "status_label", "weighted_score", "days_overdue",
]

HELP = """Commands:
  show                              render the current screen
  filter status=<s> search=<text> evaluator=<id> period=<id>
  filter clear                      reset all filters
  sort <column> [asc|desc]          e.g. sort days_overdue desc
  go <screen>                       dashboard, my_evaluations, employees, ...
  menu                              list the screens you can open
  logout | quit"""


# ── Parsing helpers ──────────────────────────────────────────────────

def apply_filter_args(state: FilterState, args):
    """Merge ``key=value`` tokens into *state*."""
    if args == ["clear"]:
        return FilterState()
    raw = {
        "status": state.status,
        "search": state.search,
        "evaluator_id": state.evaluator_id,
        "period_id": state.period_id,
    }
    aliases = {"evaluator": "evaluator_id", "period": "period_id"}
    for token in args:
        key, sep, value = token.partition("=")
        if not sep:
            continue
        raw[aliases.get(key, key)] = value or None
    return parse_filter_state(raw)


def apply_sort_args(args) -> SortState:
    if not args:
        return SortState()
    return parse_sort_state({"sort": args[0], "direction": args[1] if len(args) > 1 else "asc"})


def render_view(view: DashboardView) -> str:
    """Plain-text rendering of a dashboard view."""
    lines = []
    summary = view.summary
    lines.append(
        f"Total: {summary.get('total', 0)} | Completed: {summary.get('completed', 0)} "
        f"({summary.get('completion_rate', 0.0):.1f}%) | Pending: {summary.get('pending', 0)} | "
        f"In progress: {summary.get('in_progress', 0)} | Overdue: {summary.get('overdue', 0)}"
    )
    if view.trend is not None:
        lines.append(f"Performance trend: {view.trend:+d}%")
    elif view.trend_error:
        lines.append(f"Performance trend unavailable: {view.trend_error}")

    if view.distribution:
        lines.append("Status distribution:")
        for bucket in view.distribution:
            lines.append(f"  - {bucket.label}: {bucket.count}")

    if view.overdue_evaluators:
        lines.append("Evaluators with overdue evaluations:")
        for ev in view.overdue_evaluators:
            lines.append(
                f"  - {ev['evaluator_name'] or '(unassigned)'}: {ev['overdue_count']} "
                f"(oldest {ev['oldest_overdue'] or 'N/A'})"
            )

    if view.rows:
        df = pd.DataFrame(view.rows[:MAX_TABLE_ROWS])
        lines.append(df[[c for c in TABLE_COLUMNS if c in df.columns]].to_markdown(index=False))
        if len(view.rows) > MAX_TABLE_ROWS:
            lines.append(f"... {len(view.rows) - MAX_TABLE_ROWS} more rows")
    else:
        lines.append("(no evaluations match the current filters)")
    return "\n".join(lines)


# ── Login ────────────────────────────────────────────────────────────

def prompt_login(manager) -> bool:
    while True:
        try:
            email = input("Email (or 'quit'): ").strip()
        except (EOFError, KeyboardInterrupt):
            print("\nExiting.")
            return False
        if not email or email.lower() in {"quit", "exit"}:
            print("Goodbye.")
            return False
        try:
            password = getpass("Password: ")
        except (EOFError, KeyboardInterrupt):
            print("\nExiting.")
            return False

        try:
            session = manager.login(email, password)
        except ConsoleApiError as e:
            print(f"\n[ERROR] Login failed: {user_message(e)}")
            continue

        print(f"\n[auth] Logged in as: {session.user.display_name} (role={session.role_name or '-'})")
        return True


# ── Main loop ────────────────────────────────────────────────────────

def main():
    print("=== HR Evaluation Console ===\n")

    manager = build_manager()
    session = manager.restore()
    if session.is_authenticated:
        print(f"[auth] Session restored: {session.user.display_name} (role={session.role_name or '-'})")
    elif not prompt_login(manager):
        return

    filter_state = FilterState()
    sort_state = SortState()
    screen = capabilities(manager.session.role_name).default_route
    print(HELP)

    while True:
        try:
            line = input(f"\n[{screen}] > ").strip()
        except (EOFError, KeyboardInterrupt):
            print("\nExiting.")
            break

        if not line:
            continue
        cmd, *args = line.split()
        cmd = cmd.lower()

        if cmd in {"quit", "exit"}:
            print("Goodbye.")
            break

        if cmd == "help":
            print(HELP)
            continue

        if cmd == "logout":
            manager.logout()
            print("[auth] Logged out.")
            if not prompt_login(manager):
                break
            filter_state, sort_state = FilterState(), SortState()
            screen = capabilities(manager.session.role_name).default_route
            continue

        if cmd == "menu":
            for item in menu_items(manager.session.role_name):
                print(f"  {item['id']:<24} {item['label']}")
            continue

        if cmd == "go":
            if not args:
                print("Usage: go <screen>")
                continue
            decision = resolve_navigation(manager.session, args[0])
            if decision.action == "render":
                screen = decision.target
            else:
                print(f"[nav] {decision.reason}; redirected to {decision.target}")
                screen = decision.target or screen
            continue

        if cmd == "filter":
            filter_state = apply_filter_args(filter_state, args)
            print(f"[filter] {filter_state}")
            continue

        if cmd == "sort":
            sort_state = apply_sort_args(args)
            print(f"[sort] {sort_state.column} {sort_state.direction}")
            continue

        if cmd == "show":
            decision = resolve_navigation(manager.session, screen)
            if decision.action != "render":
                print(f"[nav] {decision.reason}; redirected to {decision.target}")
                screen = decision.target or screen
                continue
            caps = capabilities(manager.session.role_name)
            personal = decision.screen == "my_evaluations"
            try:
                records = load_records(manager.client, caps, filter_state.period_id, personal=personal)
            except ConsoleApiError as e:
                print(f"[ERROR] {user_message(e)}")
                continue
            view = build_dashboard(
                records,
                filter_state,
                sort_state,
                now=datetime.now(timezone.utc),
            )
            print(render_view(view))
            continue

        print(f"Unknown command '{cmd}'. Type 'help' for the list of commands.")


if __name__ == "__main__":
    main()
