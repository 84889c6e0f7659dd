"""Config commands -- view and modify global configuration.

Provides the ``methodmap config`` sub-command group for reading, updating,
and resetting the user's global configuration file
(:class:`~methodmap.models.GlobalConfig`). Settings control the default
output format and the well-known names the extractor looks for.
"""

from __future__ import annotations

import typer
from pydantic import ValidationError

from methodmap.output import error, format_response, info, success


config_app = typer.Typer(no_args_is_help=True)


@config_app.command("show")
def config_show(
    effective: bool = typer.Option(
        False,
        "--effective",
        help="Show the resolved config (env vars and ./methodmap.json applied).",
    ),
) -> None:
    """Show current configuration.

    Example::

        methodmap config show
        methodmap --json config show --effective
    """
    from methodmap.config import get_config_dir, load_global_config, resolve_config

    config = resolve_config() if effective else load_global_config()
    info(f"Config directory: {get_config_dir()}")
    format_response(config.model_dump(mode="json"))


@config_app.command("set")
def config_set(
    key: str = typer.Argument(
        help="Config key (dot notation, e.g., 'names.types_module')."
    ),
    value: str = typer.Argument(help="Value to set."),
) -> None:
    """Set a configuration value.

    Uses dot notation for nested keys. List-valued keys such as
    ``names.params_props`` take a comma-separated value. The updated config
    is validated against :class:`~methodmap.models.GlobalConfig` before
    saving.

    Raises:
        typer.Exit: With code 2 if the key path is invalid or validation
            fails.

    Example::

        methodmap config set output.format json
        methodmap config set names.base_driver_module @acme/base-driver
        methodmap config set names.params_props payloadParams,params
    """
    from methodmap.config import load_global_config, save_global_config, set_dotted
    from methodmap.exceptions import ConfigError
    from methodmap.models import GlobalConfig

    data = load_global_config().model_dump(mode="json")

    current = data
    for segment in key.split(".")[:-1]:
        current = current.get(segment) if isinstance(current, dict) else None
    existing = current.get(key.split(".")[-1]) if isinstance(current, dict) else None

    coerced: object = value
    if isinstance(existing, list):
        coerced = [part.strip() for part in value.split(",") if part.strip()]

    try:
        set_dotted(data, key, coerced)
    except ConfigError as exc:
        error(str(exc))
        raise typer.Exit(code=2) from None

    try:
        new_config = GlobalConfig.model_validate(data)
    except ValidationError as exc:
        error(f"Validation error: {exc}")
        raise typer.Exit(code=2) from None

    save_global_config(new_config)
    success(f"Set {key} = {coerced}")


@config_app.command("reset")
def config_reset(
    ctx: typer.Context,
) -> None:
    """Reset configuration to defaults.

    Asks for confirmation unless ``--force`` is active.

    Example::

        methodmap config reset
        methodmap --force config reset
    """
    from methodmap.config import save_global_config
    from methodmap.models import GlobalConfig

    force = ctx.obj.get("force", False) if ctx.obj else False
    if not force:
        confirmed = typer.confirm("Reset all config to defaults?")
        if not confirmed:
            info("Cancelled.")
            raise typer.Exit()

    save_global_config(GlobalConfig())
    success("Configuration reset to defaults.")
