"""Configuration management commands."""

from typing import Annotated

import typer

from app.cli.config import get_config, get_config_file, reset_config_cache, save_config
from app.cli.output import console, print_error, print_info, print_success

app = typer.Typer(help="Configuration management commands")

KEY_MAPPING = {
    "url": "api_url",
    "token": "api_token",
    "timeout": "api_timeout",
    "output": "output_format",
}


def _resolve_key(key: str) -> str:
    if key.lower() not in KEY_MAPPING:
        print_error(f"Unknown configuration key: {key}")
        print_info(f"Valid keys: {', '.join(KEY_MAPPING.keys())}")
        raise typer.Exit(1)
    return KEY_MAPPING[key.lower()]


@app.command("show")
def show_config() -> None:
    """
    Show current configuration.
    """
    config = get_config()
    config_file = get_config_file()

    console.print("[bold]Current Configuration[/bold]\n")
    console.print(f"Config file: {config_file}")
    console.print(f"File exists: {config_file.exists()}\n")

    console.print("[bold]Settings:[/bold]")
    console.print(f"  API URL:    {config.api_url}")
    console.print(f"  API Token:  {'(set)' if config.api_token else '(not set)'}")
    console.print(f"  Timeout:    {config.api_timeout}s")
    console.print(f"  Output:     {config.output_format}")


@app.command("set")
def set_config(
    key: Annotated[str, typer.Argument(help="Configuration key (url, token, timeout, output)")],
    value: Annotated[str, typer.Argument(help="Configuration value")],
) -> None:
    """
    Set a configuration value.

    Available keys:
    - url: Load Test Service API URL
    - token: Bearer token forwarded to the API
    - timeout: Request timeout in seconds
    - output: Default output format (table, json)
    """
    actual_key = _resolve_key(key)

    if actual_key == "api_timeout":
        try:
            if int(value) < 1:
                raise ValueError(value)
        except ValueError:
            print_error("Timeout must be a positive number")
            raise typer.Exit(1)

    if actual_key == "output_format" and value not in ("table", "json"):
        print_error("Output format must be one of: table, json")
        raise typer.Exit(1)

    save_config(actual_key, value)
    reset_config_cache()
    print_success(f"Set {key} = {value if key.lower() != 'token' else '(hidden)'}")


@app.command("get")
def get_config_value(
    key: Annotated[str, typer.Argument(help="Configuration key to retrieve")],
) -> None:
    """
    Get a configuration value.
    """
    actual_key = _resolve_key(key)
    value = getattr(get_config(), actual_key, None)

    if key.lower() == "token" and value:
        console.print("(set - hidden for security)")
    else:
        console.print(value or "(not set)")


@app.command("path")
def config_path() -> None:
    """
    Print the configuration file location.
    """
    console.print(str(get_config_file()))
