"""Config commands for uploadctl."""

from __future__ import annotations

import click

from uploadctl.core.config import BACKENDS, CONFIG_FILE, Config
from uploadctl.core.exceptions import ConfigurationError
from uploadctl.core.output import OutputFormat, print_error, print_key_value, print_output, print_success
from uploadctl.uploaders.constants import DEFAULT_TIMEOUT


def _load_config() -> Config:
    try:
        return Config.load(CONFIG_FILE)
    except ConfigurationError as e:
        print_error(f"Failed to load config: {e}")
        raise SystemExit(1)


@click.group()
def config() -> None:
    """Manage uploadctl configuration."""
    pass


@config.command("init")
@click.option("--backend", type=click.Choice(BACKENDS), default="simulated", help="Upload backend")
@click.option("--url", default="", help="Upload endpoint (http backend)")
@click.option("--profile", default="default", help="Profile name")
@click.option("--force", is_flag=True, help="Overwrite existing profile")
def config_init(backend: str, url: str, profile: str, force: bool) -> None:
    """Create configuration file with a new profile.

    Example:
        uploadctl config init
        uploadctl config init --backend http --url https://files.example.org/upload
    """
    if backend == "http" and not url:
        url = click.prompt("Upload URL")

    if CONFIG_FILE.exists():
        cfg = _load_config()
        if cfg.has_profile(profile) and not force:
            print_error(f"Profile '{profile}' already exists. Use --force to overwrite.")
            raise SystemExit(1)
    else:
        cfg = Config(profiles={})

    try:
        cfg.add_profile(name=profile, backend=backend, url=url)
    except ConfigurationError as e:
        print_error(str(e))
        raise SystemExit(1)

    if len(cfg.profiles) == 1:
        cfg.default_profile = profile

    cfg.save(CONFIG_FILE)

    print_success(f"Configuration saved to {CONFIG_FILE}")
    print_key_value({"profile": profile, "backend": backend, "url": url or "-"})


@config.command("show")
@click.option("--output", "-o", type=click.Choice(["json", "table"]), default="table")
def config_show(output: str) -> None:
    """Show current configuration."""
    cfg = _load_config()

    data = {
        "config_file": str(CONFIG_FILE),
        "default_profile": cfg.default_profile,
        "output_format": cfg.output_format,
        "max_concurrency": cfg.max_concurrency or "unbounded",
        "max_file_size": cfg.max_file_size,
        "profiles": list(cfg.profiles.keys()),
    }

    if output == "json":
        data["profile_details"] = {name: p.to_dict() for name, p in cfg.profiles.items()}
        data["filters"] = cfg.filters
        print_output(data, format=OutputFormat.JSON)
        return

    print_key_value(data, title="Configuration")
    click.echo()
    for name, profile in cfg.profiles.items():
        marker = " (default)" if name == cfg.default_profile else ""
        click.echo(f"Profile: {name}{marker}")
        print_key_value(
            {
                "backend": profile.backend,
                "url": profile.url or "-",
                "verify_ssl": profile.verify_ssl,
                "timeout": f"{profile.timeout}s",
            }
        )
        click.echo()


@config.command("use-context")
@click.argument("profile")
def config_use_context(profile: str) -> None:
    """Switch the active profile.

    Example:
        uploadctl config use-context production
    """
    cfg = _load_config()

    if not cfg.has_profile(profile):
        print_error(f"Profile '{profile}' not found.")
        click.echo(f"Available profiles: {', '.join(cfg.profiles.keys())}")
        raise SystemExit(1)

    cfg.set_default_profile(profile)
    cfg.save(CONFIG_FILE)

    print_success(f"Switched to profile '{profile}'")


@config.command("current-context")
def config_current_context() -> None:
    """Show the current active profile."""
    cfg = _load_config()
    click.echo(cfg.default_profile)


@config.command("add-profile")
@click.argument("name")
@click.option("--backend", type=click.Choice(BACKENDS), default="http", help="Upload backend")
@click.option("--url", default="", help="Upload endpoint (http backend)")
@click.option("--timeout", type=int, default=DEFAULT_TIMEOUT, help="Connect timeout in seconds")
@click.option("--no-verify-ssl", is_flag=True, help="Disable SSL verification")
def config_add_profile(
    name: str,
    backend: str,
    url: str,
    timeout: int,
    no_verify_ssl: bool,
) -> None:
    """Add a new profile.

    Example:
        uploadctl config add-profile staging --url https://staging.example.org/upload
    """
    cfg = _load_config()

    if cfg.has_profile(name):
        print_error(f"Profile '{name}' already exists.")
        raise SystemExit(1)

    try:
        cfg.add_profile(
            name=name,
            backend=backend,
            url=url,
            timeout=timeout,
            verify_ssl=not no_verify_ssl,
        )
    except ConfigurationError as e:
        print_error(str(e))
        raise SystemExit(1)
    cfg.save(CONFIG_FILE)

    print_success(f"Profile '{name}' added")


@config.command("remove-profile")
@click.argument("name")
@click.option("--yes", "-y", is_flag=True, help="Skip confirmation")
def config_remove_profile(name: str, yes: bool) -> None:
    """Remove a profile.

    Example:
        uploadctl config remove-profile staging
    """
    cfg = _load_config()

    if not cfg.has_profile(name):
        print_error(f"Profile '{name}' not found.")
        raise SystemExit(1)

    if name == cfg.default_profile:
        print_error("Cannot remove the default profile. Switch to another profile first.")
        raise SystemExit(1)

    if not yes:
        click.confirm(f"Remove profile '{name}'?", abort=True)

    cfg.remove_profile(name)
    cfg.save(CONFIG_FILE)

    print_success(f"Profile '{name}' removed")
