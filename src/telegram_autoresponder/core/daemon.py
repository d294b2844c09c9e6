#!/usr/bin/env python3
"""
Telegram Autoresponder Daemon.
Long-running service that answers direct messages from contacts with a
fixed text, at most once per cooldown window per sender.
"""
import argparse
import asyncio
import logging
import signal
import sys
from datetime import datetime
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from telegram_autoresponder.core.config import DEFAULT_CONFIG_PATH, load_config
from telegram_autoresponder.core.engine import AutoResponder
from telegram_autoresponder.core.errors import AutoResponderError
from telegram_autoresponder.core.gateway import TelegramGateway
from telegram_autoresponder.core.log_setup import setup_logging
from telegram_autoresponder.core.models import DaemonConfig, Outcome
from telegram_autoresponder.registry.contacts import ContactRegistry
from telegram_autoresponder.temporal.response_ledger import ResponseLedger

console = Console()
logger = logging.getLogger(__name__)


class TelegramDaemon:
    """Main daemon that wires the gateway, registry, ledger and engine together."""

    def __init__(self, config: DaemonConfig, gateway: Optional[TelegramGateway] = None):
        self.config = config
        self.gateway = gateway or TelegramGateway(config)
        self.contacts = ContactRegistry(self.gateway)
        self.ledger = ResponseLedger()
        self.engine = AutoResponder(
            gateway=self.gateway,
            contacts=self.contacts,
            ledger=self.ledger,
            response_message=config.response_message,
            cooldown=config.cooldown,
        )
        self.me: Optional[dict] = None
        self.started_at: Optional[datetime] = None

    async def initialize(self) -> None:
        """Authenticate, load contacts and register the message handler.

        Raises:
            GatewayError: If authentication or the contact load fails.
        """
        console.print("[bold blue]Initializing Telegram Autoresponder...[/bold blue]")

        self.me = await self.gateway.start()
        name = " ".join(p for p in (self.me["first_name"], self.me["last_name"]) if p)
        console.print(f"  [green]✓[/green] Logged in as: {name} (ID: {self.me['id']})")

        await self.contacts.refresh()
        console.print(f"  [green]✓[/green] Contacts loaded: {len(self.contacts)}")

        self.gateway.on_inbound_message(self.engine.on_event)
        console.print(f"  [green]✓[/green] Message handler registered")
        console.print(
            f"  [green]✓[/green] Cooldown: {self.config.response_timeout_hours}h, "
            f"response: {self.config.response_message[:60]!r}"
        )

    async def run(self) -> None:
        """Run until Telegram disconnects or the task is cancelled."""
        self.started_at = datetime.now()
        console.print(Panel.fit(
            "[bold green]Telegram Autoresponder Started[/bold green]\n"
            "Press Ctrl+C to stop",
            title="Status"
        ))

        try:
            await self.gateway.run_until_disconnected()
        except asyncio.CancelledError:
            console.print("\n[yellow]Shutdown requested...[/yellow]")
        finally:
            await self.shutdown()

    async def shutdown(self) -> None:
        """Disconnect and print the session summary."""
        await self.gateway.disconnect()
        console.print("[green]Disconnected from Telegram[/green]")
        console.print(self.create_status_table())

    def create_status_table(self) -> Table:
        """Create a status table for display."""
        table = Table(title="Autoresponder Status")
        table.add_column("Metric", style="cyan")
        table.add_column("Value", style="green")

        if self.started_at:
            uptime = datetime.now() - self.started_at
            table.add_row("Uptime", str(uptime).split('.')[0])

        stats = self.engine.stats
        table.add_row("Responses Sent", str(stats[Outcome.SENT]))
        table.add_row("Send Failures", str(self.engine.send_failures))
        table.add_row("Ignored (non-contact)", str(stats[Outcome.IGNORED_NON_CONTACT]))
        table.add_row("Ignored (cooldown)", str(stats[Outcome.IGNORED_COOLDOWN]))
        table.add_row(
            "Ignored (group/channel)",
            str(stats[Outcome.IGNORED_GROUP] + stats[Outcome.IGNORED_CHANNEL])
        )
        table.add_row("Contacts", str(len(self.contacts)))
        table.add_row("Senders Answered", str(len(self.ledger)))
        return table


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Telegram Autoresponder Daemon")
    parser.add_argument(
        'config',
        nargs='?',
        type=Path,
        default=DEFAULT_CONFIG_PATH,
        help='Path to the YAML config file (default: config.yaml)',
    )
    parser.add_argument(
        '--log-level',
        choices=["debug", "info", "warning", "error"],
        default=None,
        help='Override log_level from the config',
    )
    return parser.parse_args(argv)


async def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point. Returns the process exit code."""
    args = parse_args(argv)

    try:
        config = load_config(args.config)
    except AutoResponderError as e:
        console.print(f"[red bold]Failed to load configuration: {e}[/red bold]")
        return 1

    if args.log_level:
        config = config.model_copy(update={"log_level": args.log_level})
    try:
        setup_logging(config.log_level, config.log_file)
    except OSError as e:
        console.print(f"[red bold]Failed to setup logging: {e}[/red bold]")
        return 1
    logger.info("Starting Telegram autoresponder with config from: %s", args.config)

    daemon = TelegramDaemon(config)

    # Cancel the running task on SIGINT/SIGTERM so handlers unwind cleanly
    loop = asyncio.get_running_loop()
    main_task = asyncio.current_task()
    signals = (signal.SIGTERM, signal.SIGINT)
    for sig in signals:
        loop.add_signal_handler(sig, main_task.cancel)

    try:
        try:
            await daemon.initialize()
        except AutoResponderError as e:
            logger.error("Fatal startup error: %s", e)
            console.print(f"[red bold]Fatal error: {e}[/red bold]")
            await daemon.gateway.disconnect()
            return 1
        except asyncio.CancelledError:
            console.print("\n[yellow]Shutdown requested during startup[/yellow]")
            await daemon.gateway.disconnect()
            return 0

        await daemon.run()
    finally:
        for sig in signals:
            loop.remove_signal_handler(sig)

    logger.info("Telegram autoresponder stopped")
    return 0


def cli() -> None:
    try:
        sys.exit(asyncio.run(main()))
    except KeyboardInterrupt:
        sys.exit(0)


if __name__ == "__main__":
    cli()
