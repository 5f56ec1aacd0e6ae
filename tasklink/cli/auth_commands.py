import typer

from tasklink.cli.common import cli_errors, make_client
from tasklink.config import ConfigManager, GlobalConfig, validate_global_config
from tasklink.environment import DEFAULT_BASE_URL, mask_sensitive_value
from tasklink.errors import ConfigError
from tasklink.utils.rich_console import get_console, get_console_logger, print_table

console = get_console()
logger = get_console_logger()

auth_app = typer.Typer(help="Manage API credentials for the task service.")


@auth_app.command()
def login(
    api_key: str = typer.Option(None, "--api-key", help="API key"),
    api_secret: str = typer.Option(None, "--api-secret", help="API secret"),
    base_url: str = typer.Option(None, "--base-url", help="Base URL of the task service"),
    check: bool = typer.Option(True, "--check/--no-check", help="Test the credentials before saving"),
):
    """Save API credentials to the global config file."""
    manager = ConfigManager()
    current = manager.get_global_config() or GlobalConfig()

    config = GlobalConfig(
        api_key=api_key or typer.prompt("API key", default=current.api_key or None),
        api_secret=api_secret or typer.prompt("API secret", hide_input=True),
        base_url=base_url or current.base_url or DEFAULT_BASE_URL,
    )

    with cli_errors("Login failed"):
        errors = validate_global_config(config)
        if errors:
            raise ConfigError("\n".join(errors))
        if check and not make_client(config).test_connection():
            raise ConfigError("Could not connect with these credentials. Nothing was saved.")
        manager.set_global_config(config)

    logger.success(f"Credentials saved to {manager.global_config_path}")


@auth_app.command()
def logout(yes: bool = typer.Option(False, "--yes", "-y", help="Don't ask for confirmation")):
    """Remove the stored API credentials."""
    manager = ConfigManager()
    if not manager.global_config_path.exists():
        console.print("[yellow]No stored credentials.[/yellow]")
        return
    if not yes and not typer.confirm("Remove stored API credentials?", default=False):
        console.print("Logout cancelled.")
        return
    manager.remove_global_config()
    logger.success("Credentials removed")


@auth_app.command("status")
def auth_status():
    """Show which credentials are in use and whether they work."""
    manager = ConfigManager()
    config = manager.get_api_config()
    if config is None:
        console.print('[yellow]Not logged in. Run "tasklink auth login".[/yellow]')
        raise typer.Exit(1)

    source = "config file" if manager.has_valid_global_config() else "environment"
    connected = make_client(config).test_connection()
    print_table(
        ["Setting", "Value"],
        [
            ["API key", mask_sensitive_value(config.api_key)],
            ["Base URL", config.base_url],
            ["Source", source],
            ["Connection", "✅ OK" if connected else "❌ Failed"],
        ],
        title="Authentication",
    )
    if not connected:
        raise typer.Exit(1)
