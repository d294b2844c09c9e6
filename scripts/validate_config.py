#!/usr/bin/env python3
"""
Configuration Validation Script.

Validates the autoresponder configuration (YAML file + environment) and the
local files it depends on before starting the daemon.

Usage:
    python scripts/validate_config.py [config.yaml]

Exit codes:
    0: All validations passed
    1: One or more validations failed
"""

from __future__ import annotations

import os
import sys
from pathlib import Path
from typing import List, Optional, Tuple

from dotenv import load_dotenv
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from telegram_autoresponder.core.config import DEFAULT_CONFIG_PATH, ENV_VARS, load_config
from telegram_autoresponder.core.errors import ConfigError
from telegram_autoresponder.core.models import DaemonConfig

# Load environment variables from .env file
PROJECT_ROOT = Path(__file__).parent.parent
load_dotenv(PROJECT_ROOT / ".env")
load_dotenv()  # Also load from current directory if exists

# Initialize console with full width
console = Console(width=120)

# Type alias for validation results
# (success, check_name, message)
ValidationResult = Tuple[bool, str, str]

SENSITIVE_KEYWORDS = ["HASH", "PASSWORD", "PHONE"]


def mask_value(name: str, value: object) -> str:
    """
    Render a config value for display, hiding secrets.

    Args:
        name: Field or environment variable name.
        value: The value to render.

    Returns:
        Masked or truncated string.
    """
    if value is None or value == "":
        return "Not set"

    text = str(value)
    if any(keyword in name.upper() for keyword in SENSITIVE_KEYWORDS):
        if len(text) > 8:
            return f"{text[:3]}...{text[-2:]}"
        return "***"

    # Truncate long values
    return text[:50] + "..." if len(text) > 50 else text


# =============================================================================
# CONFIGURATION CHECK
# =============================================================================


def check_config(config_path: Path) -> Tuple[ValidationResult, Optional[DaemonConfig]]:
    """
    Load and validate the configuration.

    Returns:
        ValidationResult and the loaded config (None on failure).
    """
    source = str(config_path) if config_path.exists() else "environment only"
    try:
        config = load_config(config_path)
    except ConfigError as e:
        return (False, "Configuration", str(e)), None
    return (True, "Configuration", f"Valid ({source})"), config


def check_env_overrides() -> List[ValidationResult]:
    """Report which environment variables override the config file."""
    results: List[ValidationResult] = []
    for var in ENV_VARS:
        value = os.getenv(var)
        if value:
            results.append((True, var, f"Set: {mask_value(var, value)}"))
    return results


# =============================================================================
# SESSION / LOG FILE CHECKS
# =============================================================================


def check_session_file(config: DaemonConfig) -> ValidationResult:
    """
    Check whether a Telethon session already exists.

    A missing session is not a failure: the daemon will prompt for the login
    code on first start, so it must be started interactively once.
    """
    path = Path(str(config.session_file))
    if path.suffix != ".session":
        path = path.with_name(path.name + ".session")

    if path.exists():
        return (True, "Session File", f"Found {path}")
    return (True, "Session File", f"{path} not found - first start will ask for the login code")


def check_log_file(config: DaemonConfig) -> ValidationResult:
    """Check that the log file directory can be created and written."""
    if not config.log_file:
        return (True, "Log File", "Not set (console only)")

    log_dir = Path(config.log_file).parent
    try:
        log_dir.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        return (False, "Log File", f"Cannot create {log_dir}: {e}")
    if not os.access(log_dir, os.W_OK):
        return (False, "Log File", f"{log_dir} is not writable")
    return (True, "Log File", f"Writable: {config.log_file}")


# =============================================================================
# MAIN VALIDATION RUNNER
# =============================================================================


def create_config_table(config: DaemonConfig) -> Table:
    """Create a table of effective configuration values."""
    table = Table(title="Effective Configuration")
    table.add_column("Field", style="cyan")
    table.add_column("Value", style="green")
    for name, value in config.model_dump().items():
        table.add_row(name, mask_value(name, value))
    return table


def run_validations(config_path: Path) -> bool:
    """
    Run all validation checks.

    Returns:
        True if all validations passed, False otherwise.
    """
    console.print(
        Panel.fit(
            "[bold blue]Telegram Autoresponder Configuration Validation[/bold blue]",
            title="Configuration Validator",
            border_style="blue",
        )
    )

    config_result, config = check_config(config_path)
    results: List[ValidationResult] = [config_result]
    results.extend(check_env_overrides())
    if config is not None:
        results.append(check_session_file(config))
        results.append(check_log_file(config))

    table = Table(title="Validation Results")
    table.add_column("Check", style="cyan")
    table.add_column("Status")
    table.add_column("Details")
    for success, name, msg in results:
        status = "[green]PASS[/green]" if success else "[red]FAIL[/red]"
        table.add_row(name, status, msg)
    console.print(table)

    if config is not None:
        console.print(create_config_table(config))

    all_passed = all(success for success, _, _ in results)
    if all_passed:
        console.print(Panel.fit("[bold green]All validations passed![/bold green]", title="Success"))
    else:
        console.print(
            Panel.fit(
                "[bold red]Some validations failed![/bold red]\n\n"
                "Required: APP_ID, APP_HASH and PHONE (config file or environment).\n"
                "Get API credentials at https://my.telegram.org/apps",
                title="Failed",
                border_style="red",
            )
        )
    return all_passed


# =============================================================================
# ENTRY POINT
# =============================================================================


def main(argv: Optional[List[str]] = None) -> None:
    """Main entry point for the validation script."""
    argv = sys.argv[1:] if argv is None else argv
    config_path = Path(argv[0]) if argv else DEFAULT_CONFIG_PATH
    try:
        sys.exit(0 if run_validations(config_path) else 1)
    except KeyboardInterrupt:
        console.print("\n[yellow]Validation cancelled by user[/yellow]")
        sys.exit(130)


if __name__ == "__main__":
    main()
