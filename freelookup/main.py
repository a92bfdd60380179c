"""Main entry point for the freelookup application.

Sets up the Typer CLI application, performs dependency injection (Composition Root),
defines CLI commands, and delegates execution to the CommandHandler.
"""

import asyncio
import logging
import sys
from typing import Any, Coroutine, Dict, Optional

import typer
from typing_extensions import Annotated

from freelookup import __version__
from freelookup.core.command_handler import CommandHandler
from freelookup.core.services.batch_service import BatchService
from freelookup.core.services.lookup_service import LookupService
from freelookup.core.services.skill_catalog import SkillCatalog
from freelookup.infrastructure.cli.display import ConsoleDisplay
from freelookup.infrastructure.config.settings import (
    get_bool,
    get_config,
    get_float,
    load_configuration,
    set_config,
)
from freelookup.infrastructure.monitoring.logger_setup import setup_logging
from freelookup.infrastructure.providers.registry import ProviderRegistry
from freelookup.infrastructure.resilience.provider_rotator import ProviderRotator

logger = logging.getLogger(__name__)

# --- Dependency Injection Container (Manual) ---

_dependencies: Dict[str, Any] = {}


def create_dependencies(plain_output: bool = False) -> Dict[str, Any]:
    """Creates and wires up all dependencies for the application.

    This acts as the Composition Root.
    """
    load_configuration()
    setup_logging(
        log_level=get_config('logging.level'),
        log_format=get_config('logging.format'),
        log_file=get_config('logging.file'),
    )
    logger.debug("Initializing application dependencies...")

    dependencies: Dict[str, Any] = {}
    dependencies['ui'] = ConsoleDisplay(plain=plain_output)
    dependencies['rotator'] = ProviderRotator(
        timeout_s=get_float('http.timeout_seconds'),
        user_agent=get_config('http.user_agent'),
    )
    dependencies['registry'] = ProviderRegistry()
    dependencies['lookup_service'] = LookupService(
        rotator=dependencies['rotator'],
        registry=dependencies['registry'],
        rotate_start=get_bool('rotation.rotate_start'),
    )
    dependencies['batch_service'] = BatchService(
        delay_s=get_float('batch.delay_seconds'),
        backoff={
            'initial_delay': get_float('batch.initial_backoff_seconds'),
            'factor': get_float('batch.backoff_factor'),
            'max_delay': get_float('batch.max_backoff_seconds'),
        },
    )
    dependencies['skill_catalog'] = SkillCatalog()
    dependencies['command_handler'] = CommandHandler(
        lookup_service=dependencies['lookup_service'],
        batch_service=dependencies['batch_service'],
        skill_catalog=dependencies['skill_catalog'],
        ui=dependencies['ui'],
    )
    logger.debug("All dependencies initialized successfully.")
    return dependencies


def get_handler(plain_output: bool = False) -> CommandHandler:
    """Returns the wired CommandHandler, building dependencies on first use."""
    if not _dependencies:
        _dependencies.update(create_dependencies(plain_output=plain_output))
    return _dependencies['command_handler']


# --- Typer App Definition ---
app = typer.Typer(
    name="freelookup",
    help=f"freelookup v{__version__}: search, translate, geolocate and check the weather through free public APIs, "
         "falling back across interchangeable instances.",
    add_completion=False,
)


def run_async(coro: Coroutine[Any, Any, int]) -> None:
    """Runs a handler coroutine and exits with its return code."""
    code = asyncio.run(coro)
    raise typer.Exit(code=code)


# --- Shared options ---

JsonOption = Annotated[bool, typer.Option("--json", help="Print raw JSON instead of a table.")]
VerboseOption = Annotated[bool, typer.Option("--verbose", "-v", help="Show every provider attempt.")]
LatOption = Annotated[float, typer.Option("--lat", help="Latitude in decimal degrees (-90..90).")]
LonOption = Annotated[float, typer.Option("--lon", help="Longitude in decimal degrees (-180..180).")]


@app.callback()
def main_callback(
    log_level: Annotated[
        Optional[str],
        typer.Option("--log-level", help="Logging level (DEBUG, INFO, WARNING, ERROR).")
    ] = None,
    timeout: Annotated[
        Optional[float],
        typer.Option("--timeout", min=0.1, help="Per-provider timeout in seconds.")
    ] = None,
    rotate: Annotated[
        Optional[bool],
        typer.Option("--rotate/--no-rotate", help="Start each lookup at the next provider in the list.")
    ] = None,
):
    """Configure process-wide options before a command runs."""
    if log_level:
        set_config('logging.level', log_level.upper())
    if timeout is not None:
        set_config('http.timeout_seconds', timeout)
    if rotate is not None:
        set_config('rotation.rotate_start', rotate)


@app.command()
def search(
    query: Annotated[str, typer.Argument(help="Search terms.")],
    language: Annotated[str, typer.Option("--lang", "-l", help="Result language.")] = "en",
    max_results: Annotated[int, typer.Option("--max", "-n", help="Maximum number of results.")] = 10,
    as_json: JsonOption = False,
    verbose: VerboseOption = False,
):
    """Search the web through SearXNG instances (DuckDuckGo as last resort)."""
    run_async(get_handler(as_json).handle_search(query, language, max_results, as_json, verbose))


@app.command()
def translate(
    text: Annotated[str, typer.Argument(help="Text to translate.")],
    target: Annotated[str, typer.Option("--target", "-t", help="Target language code.")],
    source: Annotated[str, typer.Option("--source", "-s", help="Source language code or 'auto'.")] = "auto",
    as_json: JsonOption = False,
    verbose: VerboseOption = False,
):
    """Translate text through LibreTranslate instances (MyMemory as last resort)."""
    run_async(get_handler(as_json).handle_translate(text, target, source, as_json, verbose))


@app.command()
def ip(
    address: Annotated[Optional[str], typer.Argument(help="IP address; omit for your own.")] = None,
    as_json: JsonOption = False,
    verbose: VerboseOption = False,
):
    """Geolocate an IP address."""
    run_async(get_handler(as_json).handle_ip(address, as_json, verbose))


@app.command()
def geocode(
    address: Annotated[str, typer.Argument(help="Free-form address or place name.")],
    limit: Annotated[int, typer.Option("--limit", help="Maximum number of matches.")] = 1,
    as_json: JsonOption = False,
    verbose: VerboseOption = False,
):
    """Find coordinates for an address (Nominatim, then Photon)."""
    run_async(get_handler(as_json).handle_geocode(address, limit, as_json, verbose))


@app.command()
def reverse(
    lat: LatOption,
    lon: LonOption,
    as_json: JsonOption = False,
    verbose: VerboseOption = False,
):
    """Find the place name at a coordinate."""
    run_async(get_handler(as_json).handle_reverse(lat, lon, as_json, verbose))


@app.command()
def weather(
    lat: LatOption,
    lon: LonOption,
    as_json: JsonOption = False,
    verbose: VerboseOption = False,
):
    """Current weather at a coordinate (Open-Meteo, then wttr.in)."""
    run_async(get_handler(as_json).handle_weather(lat, lon, as_json, verbose))


@app.command()
def distance(
    lat1: Annotated[float, typer.Option("--lat1", help="Latitude of the first point.")],
    lon1: Annotated[float, typer.Option("--lon1", help="Longitude of the first point.")],
    lat2: Annotated[float, typer.Option("--lat2", help="Latitude of the second point.")],
    lon2: Annotated[float, typer.Option("--lon2", help="Longitude of the second point.")],
    as_json: JsonOption = False,
):
    """Great-circle distance between two points (computed locally)."""
    raise typer.Exit(code=get_handler(as_json).handle_distance(lat1, lon1, lat2, lon2, as_json))


@app.command(name="weather-code")
def weather_code(
    code: Annotated[int, typer.Argument(help="WMO weather interpretation code.")],
):
    """Describe a WMO weather code."""
    raise typer.Exit(code=get_handler().handle_weather_code(code))


@app.command(name="json-to-csv")
def json_to_csv_command(
    source: Annotated[typer.FileText, typer.Argument(help="JSON file ('-' for stdin).")],
):
    """Convert a JSON array of objects to CSV, flattening nested fields."""
    raise typer.Exit(code=get_handler(plain_output=True).handle_json_to_csv(source.read()))


@app.command(name="csv-to-json")
def csv_to_json_command(
    source: Annotated[typer.FileText, typer.Argument(help="CSV file with header row ('-' for stdin).")],
    unflatten: Annotated[bool, typer.Option("--unflatten", help="Rebuild nesting from dotted column names.")] = False,
    infer_types: Annotated[
        bool,
        typer.Option("--infer-types/--no-infer-types", help="Turn numbers, booleans and empty cells into JSON types.")
    ] = True,
):
    """Convert CSV to a JSON array of objects."""
    handler = get_handler(plain_output=True)
    raise typer.Exit(code=handler.handle_csv_to_json(source.read(), unflatten, infer_types))


@app.command(name="batch-translate")
def batch_translate(
    source_file: Annotated[typer.FileText, typer.Argument(help="One text per line ('-' for stdin).")],
    target: Annotated[str, typer.Option("--target", "-t", help="Target language code.")],
    source: Annotated[str, typer.Option("--source", "-s", help="Source language code or 'auto'.")] = "auto",
    delay: Annotated[Optional[float], typer.Option("--delay", min=0, help="Seconds between requests.")] = None,
    as_json: JsonOption = False,
):
    """Translate many lines sequentially, pausing between requests."""
    handler = get_handler(as_json)
    if delay is not None:
        handler.batch_service.delay_s = delay
    run_async(handler.handle_batch("translate", source_file.readlines(), as_json, target=target, source=source))


@app.command(name="batch-geocode")
def batch_geocode(
    source_file: Annotated[typer.FileText, typer.Argument(help="One address per line ('-' for stdin).")],
    delay: Annotated[Optional[float], typer.Option("--delay", min=0, help="Seconds between requests.")] = None,
    as_json: JsonOption = False,
):
    """Geocode many addresses sequentially, pausing between requests."""
    handler = get_handler(as_json)
    if delay is not None:
        handler.batch_service.delay_s = delay
    run_async(handler.handle_batch("geocode", source_file.readlines(), as_json))


@app.command(name="skills")
def list_skills():
    """List the bundled skill documents."""
    raise typer.Exit(code=get_handler().handle_list_skills())


@app.command(name="skill")
def show_skill(
    name: Annotated[str, typer.Argument(help="Skill name as listed by 'freelookup skills'.")],
):
    """Show one skill document."""
    raise typer.Exit(code=get_handler().handle_show_skill(name))


# --- Main Execution Guard ---

def cli_entry_point():
    """Function to be called by the script entry point in pyproject.toml."""
    try:
        app()
    except KeyboardInterrupt:
        print("Interrupted.", file=sys.stderr)
        sys.exit(130)


if __name__ == "__main__":
    cli_entry_point()
