#!/usr/bin/env python3
import argparse
import json
import logging
import os
import select
import sys
import termios
import tty
from typing import Optional, TypeVar

from rich import box
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.prompt import Confirm, FloatPrompt, IntPrompt, Prompt
from rich.table import Table
from rich.text import Text

from spark_rebalancer import (
    Account,
    BalancedHolding,
    BalanceMode,
    BalanceOptions,
    DesiredAllocationEntry,
    GatewayError,
    Holding,
    HoldingsSummary,
    SparkBroker,
    SparkGateway,
    balance_portfolio,
    parse_account_holdings,
    parse_account_holdings_summary,
)

logger = logging.getLogger(__name__)
console = Console()

# ANSI escape codes for terminal styling
ANSI_BOLD_CYAN = "\033[1;36m"
ANSI_DIM = "\033[2m"
ANSI_RESET = "\033[0m"
ANSI_MOVE_UP = "\033[{}A"
ANSI_CLEAR_LINE = "\033[2K\n"

LOG_LEVEL_ENV = "SPARK_LOG_LEVEL"
DEFAULT_LOG_LEVEL = logging.WARNING

BROKER_LABELS: dict[SparkBroker, str] = {
    SparkBroker.NESUA: "Nesua",
    SparkBroker.MEITAV: "Meitav",
    SparkBroker.PSAGOT: "Psagot",
}

MODES: list[BalanceMode] = [BalanceMode.WORTH_BASIS, BalanceMode.PERCENT_BASIS]
MODE_LABELS: dict[BalanceMode, str] = {
    BalanceMode.WORTH_BASIS: "Worth basis (fund worth over portfolio worth)",
    BalanceMode.PERCENT_BASIS: "Percent basis (reported fund percents)",
}

T = TypeVar("T")


def resolve_log_level(name: Optional[str]) -> int:
    """Map a level name such as "debug" to its number, WARNING when unknown."""
    level = logging.getLevelName((name or "").upper())
    return level if isinstance(level, int) else DEFAULT_LOG_LEVEL


def configure_logging() -> None:
    level = resolve_log_level(os.environ.get(LOG_LEVEL_ENV))
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
    )


def _fmt(value: Optional[float], spec: str = ",.2f") -> str:
    return "-" if value is None else format(value, spec)


def holdings_table(holdings: list[Holding], summary: HoldingsSummary, title: str) -> Table:
    """Build a Rich table showing the account's funds and worth."""
    t = Table(title=title, box=box.ROUNDED, title_style="bold white")
    t.add_column("Fund", style="cyan")
    t.add_column("Name")
    t.add_column("Amount", justify="right")
    t.add_column("Worth", justify="right")
    t.add_column("Percent", justify="right", style="yellow")

    for h in holdings:
        t.add_row(
            str(h.fund_number) if h.fund_number is not None else "-",
            h.fund_name or "",
            _fmt(h.fund_amount),
            _fmt(h.fund_worth),
            f"{_fmt(h.fund_percent, '.2f')}%",
        )

    t.add_section()
    t.add_row("", "[dim]Cash[/dim]", "", f"[dim]{summary.cash_worth:,.2f}[/dim]", "")
    t.add_row("", "", "Total", f"[bold]{summary.total_worth:,.2f}[/bold]", "")
    return t


def results_table(
    desired: list[DesiredAllocationEntry],
    results: list[Optional[BalancedHolding]],
) -> Table:
    """Build a Rich table showing the cash to move per fund."""
    t = Table(title="Balancing", box=box.ROUNDED, title_style="bold white")
    t.add_column("Fund", style="cyan")
    t.add_column("Name")
    t.add_column("Target", justify="right", style="green")
    t.add_column("Amount to balance", justify="right")

    for entry, result in zip(desired, results):
        if result is None:
            t.add_row(
                str(entry.fund_number),
                "[dim]not held, skipped[/dim]",
                f"{entry.percent:.2f}%",
                "",
            )
            continue
        negative = result.amount_to_balance.startswith("-")
        t.add_row(
            str(entry.fund_number),
            result.fund_name or "",
            f"{entry.percent:.2f}%",
            Text(result.amount_to_balance, style="red" if negative else "green"),
        )
    return t


def _getch() -> str:
    """Read a single keypress from stdin, handling escape sequences."""
    fd = sys.stdin.fileno()
    old = termios.tcgetattr(fd)
    try:
        tty.setraw(fd)
        ch = os.read(fd, 1).decode()
        if ch == "\x1b" and select.select([fd], [], [], 0.05)[0]:
            ch += os.read(fd, 1).decode()
            if select.select([fd], [], [], 0.05)[0]:
                ch += os.read(fd, 1).decode()
    finally:
        termios.tcsetattr(fd, termios.TCSADRAIN, old)
    return ch


def _render_menu(options: list[T], labels: dict[T, str], selected: int) -> str:
    lines = []
    for i, opt in enumerate(options):
        if i == selected:
            lines.append(f"{ANSI_BOLD_CYAN}  ▸ {labels[opt]}{ANSI_RESET}")
        else:
            lines.append(f"{ANSI_DIM}    {labels[opt]}{ANSI_RESET}")
    return "\n".join(lines) + "\n"


def _clear_lines(count: int) -> None:
    sys.stdout.write(
        ANSI_MOVE_UP.format(count)
        + "".join(ANSI_CLEAR_LINE for _ in range(count))
        + ANSI_MOVE_UP.format(count)
    )


def pick(options: list[T], labels: dict[T, str], default: int = 0) -> T:
    """Arrow-key picker for selecting from a list of options."""
    selected = default
    output = _render_menu(options, labels, selected)
    sys.stdout.write(output)
    sys.stdout.flush()

    while True:
        key = _getch()
        if key == "\x1b[A":
            selected = (selected - 1) % len(options)
        elif key == "\x1b[B":
            selected = (selected + 1) % len(options)
        elif key in ("\r", "\n"):
            break
        else:
            continue

        _clear_lines(output.count("\n"))
        output = _render_menu(options, labels, selected)
        sys.stdout.write(output)
        sys.stdout.flush()

    _clear_lines(output.count("\n"))
    sys.stdout.flush()

    console.print(f"  [bold cyan]▸ {labels[options[selected]]}[/bold cyan]")
    return options[selected]


def _prompt_desired_allocation(holdings: list[Holding]) -> list[DesiredAllocationEntry]:
    console.print()
    console.print("[bold]Desired allocation[/bold] [dim](percent per fund)[/dim]")
    desired = []
    for h in holdings:
        if h.fund_number is None:
            continue
        current = h.fund_percent if h.fund_percent is not None else 0.0
        percent = FloatPrompt.ask(
            f"  {h.fund_number} {h.fund_name or ''}".rstrip(),
            default=round(current, 2),
        )
        desired.append(DesiredAllocationEntry(fund_number=h.fund_number, percent=percent))

    while Confirm.ask("  Add a fund you don't hold yet?", default=False):
        fund_number = IntPrompt.ask("  Fund number")
        percent = FloatPrompt.ask("  Percent")
        desired.append(DesiredAllocationEntry(fund_number=fund_number, percent=percent))

    total = sum(entry.percent for entry in desired)
    if abs(total - 100) > 0.01:
        console.print(f"  [yellow]Desired percents add up to {total:.2f}%, not 100%[/yellow]")
    return desired


def _prompt_options() -> BalanceOptions:
    console.print()
    console.print("[bold]Balance mode:[/bold]")
    mode = pick(MODES, MODE_LABELS)
    if mode is not BalanceMode.WORTH_BASIS:
        return BalanceOptions(mode=mode)

    addition = FloatPrompt.ask("  Cash to add to the portfolio", default=0.0)
    use_cash = Confirm.ask("  Use the cash already in the account?", default=False)
    return BalanceOptions(mode=mode, addition_to_portfolio=addition, use_cash_in_account=use_cash)


def run_balance(holdings: list[Holding], summary: HoldingsSummary, title: str) -> None:
    console.print(holdings_table(holdings, summary, title))

    desired = _prompt_desired_allocation(holdings)
    options = _prompt_options()

    console.print()
    results = balance_portfolio(holdings, summary, desired, options)
    console.print(results_table(desired, results))


def _pick_account(accounts: list[Account]) -> Account:
    labels = {a: f"{a.name or ''} ({a.number or a.key})".strip() for a in accounts}
    console.print()
    console.print("[bold]Account:[/bold]")
    return pick(accounts, labels)


def run_online() -> None:
    console.print("[bold]Broker:[/bold]")
    broker = pick(list(BROKER_LABELS), BROKER_LABELS)
    username = Prompt.ask("  Username")
    password = Prompt.ask("  Password", password=True)

    gateway = SparkGateway(broker)
    with console.status("[bold]Signing in to Spark...[/bold]"):
        gateway.authenticate(username, password)
        accounts = gateway.get_accounts()

    if not accounts:
        console.print("[yellow]  No accounts found for this user.[/yellow]")
        return

    while True:
        account = _pick_account(accounts)
        with console.status("[bold]Fetching holdings...[/bold]"):
            holdings = gateway.get_account_holdings(account)
            summary = gateway.get_account_holdings_summary(account)

        console.print()
        run_balance(holdings, summary, f"Account {account.number or account.key}")

        console.print()
        if not Confirm.ask("  Balance another account?", default=False):
            break


def load_snapshot(path: str) -> tuple[list[Holding], HoldingsSummary]:
    """Read raw `holdings` and `summary` responses saved in a JSON file.

    Raises:
        ValueError: If the file is not JSON or lacks one of the two responses.
        OSError: If the file cannot be read.
    """
    with open(path, encoding="utf-8") as f:
        snapshot = json.load(f)

    if not isinstance(snapshot, dict) or not {"holdings", "summary"} <= snapshot.keys():
        raise ValueError(f"Snapshot {path} must contain 'holdings' and 'summary'")

    return (
        parse_account_holdings(snapshot["holdings"]),
        parse_account_holdings_summary(snapshot["summary"]),
    )


def run_offline(path: str) -> None:
    holdings, summary = load_snapshot(path)
    run_balance(holdings, summary, os.path.basename(path))


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Compute the cash needed to balance a Spark account's funds."
    )
    parser.add_argument(
        "--from-json",
        dest="snapshot",
        metavar="PATH",
        help="balance a saved snapshot instead of signing in to Spark",
    )
    return parser


def main(argv: Optional[list[str]] = None) -> None:
    """Entry point for the CLI application."""
    args = build_parser().parse_args(argv)
    configure_logging()

    console.print()
    console.print(Panel("[bold]Spark Rebalancer[/bold] · fund balancing", box=box.DOUBLE))
    console.print()

    try:
        if args.snapshot:
            run_offline(args.snapshot)
        else:
            run_online()
    except (GatewayError, ValueError, OSError) as e:
        logger.error("%s", e)
        sys.exit(1)


if __name__ == "__main__":
    main()
