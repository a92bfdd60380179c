"""Command Handler: Orchestrates CLI command execution.

Receives commands from the main entry point (main.py), delegates the work to
the lookup, batch and skill services, and renders results or errors through
the UserInterface. Every handler returns a process exit code.
"""

import dataclasses
import json
import logging
from typing import Any, Callable, Dict, List, Optional, Sequence

from freelookup.core.services.batch_service import BatchService
from freelookup.core.services.lookup_service import LookupService
from freelookup.core.services.skill_catalog import SkillCatalog
from freelookup.domain.errors import (
    AllProvidersFailed,
    InvalidQueryError,
    ProviderHTTPError,
    ProviderTimeoutError,
    SkillFormatError,
)
from freelookup.domain.interfaces.user_interface import UserInterface
from freelookup.domain.models.results import BatchItemOutcome, RotationResult
from freelookup.utils.geo import haversine_km
from freelookup.utils.tabular import csv_to_json, json_to_csv
from freelookup.utils.weather_codes import describe_weather_code

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_LOOKUP_FAILED = 1
EXIT_INVALID_INPUT = 2

PROVIDER_CONFIG_KEYS = {
    "search": "providers.searxng",
    "translate": "providers.libretranslate",
    "ip": "providers.ipapi_co",
    "geocode": "providers.nominatim",
    "reverse": "providers.nominatim",
    "weather": "providers.open_meteo",
}


def remediation_hint(error: AllProvidersFailed) -> str:
    """Suggests the next manual action for an exhausted rotation."""
    last = error.last_error
    if error.rate_limited:
        return "The services are rate limiting requests. Wait a minute and retry, or increase the batch delay."
    if isinstance(last, ProviderHTTPError) and last.status_code in (401, 403):
        return "The instances refused the request. Check the API key or try a different instance."
    if isinstance(last, ProviderTimeoutError):
        return "The services did not answer in time. Retry later or raise http.timeout_seconds."
    key = PROVIDER_CONFIG_KEYS.get(error.operation, "providers.<kind>")
    return f"Try a different instance by configuring '{key}' (or check your network connection)."


def to_jsonable(value: Any) -> Any:
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return dataclasses.asdict(value)
    if isinstance(value, list):
        return [to_jsonable(v) for v in value]
    return value


class CommandHandler:
    """Handles incoming commands and delegates to appropriate services."""

    def __init__(
        self,
        lookup_service: LookupService,
        batch_service: BatchService,
        skill_catalog: SkillCatalog,
        ui: UserInterface,
    ):
        """Initializes the CommandHandler with required services."""
        self.lookup_service = lookup_service
        self.batch_service = batch_service
        self.skill_catalog = skill_catalog
        self.ui = ui

    # --- Rendering helpers ---

    def _emit(self, value: Any, as_json: bool, title: str) -> None:
        data = to_jsonable(value)
        if as_json:
            self.ui.display_output(json.dumps(data, indent=2, ensure_ascii=False), markdown=False)
            return
        rows = data if isinstance(data, list) else [data]
        self.ui.display_table(rows, title=title)

    def _report_lookup_failure(self, error: AllProvidersFailed) -> int:
        logger.error(f"Lookup failed: {error}")
        self.ui.display_error(
            f"All providers failed for '{error.operation}'.\n"
            f"Tried: {', '.join(error.tried)}\n"
            f"Last error: {type(error.last_error).__name__}: {error.last_error}",
            hint=remediation_hint(error),
        )
        if error.attempts:
            self.ui.display_attempts(error.attempts)
        return EXIT_LOOKUP_FAILED

    async def _lookup(self, operation: str, call: Callable[[], Any], as_json: bool, verbose: bool) -> int:
        try:
            result: RotationResult = await call()
        except InvalidQueryError as e:
            self.ui.display_error(f"Invalid input: {e}")
            return EXIT_INVALID_INPUT
        except AllProvidersFailed as e:
            return self._report_lookup_failure(e)

        self._emit(result.value, as_json, title=f"{operation} via {result.provider}")
        if verbose:
            self.ui.display_attempts(result.attempts)
        return EXIT_OK

    # --- Lookup commands ---

    async def handle_search(self, text: str, language: str = "en", max_results: int = 10,
                            as_json: bool = False, verbose: bool = False) -> int:
        logger.info(f"Handling 'search' for: {text!r}")
        return await self._lookup(
            "search", lambda: self.lookup_service.search(text, language, max_results), as_json, verbose
        )

    async def handle_translate(self, text: str, target: str, source: str = "auto",
                               as_json: bool = False, verbose: bool = False) -> int:
        logger.info(f"Handling 'translate' {source}->{target}")
        return await self._lookup(
            "translate", lambda: self.lookup_service.translate(text, target, source), as_json, verbose
        )

    async def handle_ip(self, address: Optional[str] = None, as_json: bool = False, verbose: bool = False) -> int:
        return await self._lookup("ip", lambda: self.lookup_service.lookup_ip(address), as_json, verbose)

    async def handle_geocode(self, address: str, limit: int = 1, as_json: bool = False, verbose: bool = False) -> int:
        return await self._lookup("geocode", lambda: self.lookup_service.geocode(address, limit), as_json, verbose)

    async def handle_reverse(self, lat: float, lon: float, as_json: bool = False, verbose: bool = False) -> int:
        return await self._lookup("reverse", lambda: self.lookup_service.reverse_geocode(lat, lon), as_json, verbose)

    async def handle_weather(self, lat: float, lon: float, as_json: bool = False, verbose: bool = False) -> int:
        return await self._lookup("weather", lambda: self.lookup_service.current_weather(lat, lon), as_json, verbose)

    # --- Batch commands ---

    async def handle_batch(self, operation: str, lines: Sequence[str], as_json: bool = False, **options: Any) -> int:
        """Runs `translate` or `geocode` over non-blank input lines, in order."""
        items = [line.strip() for line in lines if line.strip()]
        if not items:
            self.ui.display_error("Input contains no non-blank lines.")
            return EXIT_INVALID_INPUT

        if operation == "translate":
            target = options["target"]
            source = options.get("source", "auto")
            call = lambda item: self.lookup_service.translate(item, target, source)  # noqa: E731
        elif operation == "geocode":
            call = lambda item: self.lookup_service.geocode(item, 1)  # noqa: E731
        else:
            self.ui.display_error(f"Batch mode does not support '{operation}'.")
            return EXIT_INVALID_INPUT

        outcomes = await self.batch_service.run(items, call, operation_name=f"batch-{operation}")
        rows = [self._batch_row(operation, o) for o in outcomes]
        if as_json:
            self.ui.display_output(json.dumps(rows, indent=2, ensure_ascii=False), markdown=False)
        else:
            self.ui.display_table(rows, title=f"batch {operation}")

        failed = [o for o in outcomes if not o.ok]
        if failed:
            self.ui.display_warning(f"{len(failed)} of {len(outcomes)} item(s) failed.")
            rate_limited = [o for o in failed if isinstance(o.error, AllProvidersFailed) and o.error.rate_limited]
            if rate_limited:
                self.ui.display_warning("Some items were rate limited; rerun them later with a larger --delay.")
            return EXIT_LOOKUP_FAILED
        return EXIT_OK

    @staticmethod
    def _batch_row(operation: str, outcome: BatchItemOutcome) -> Dict[str, Any]:
        row: Dict[str, Any] = {"input": outcome.item}
        if not outcome.ok:
            row.update({"status": "failed", "error": str(outcome.error)})
            return row
        value = outcome.result.value
        if operation == "translate":
            row["output"] = value.text
        else:
            place = value[0]
            row.update({"lat": place.lat, "lon": place.lon, "display_name": place.display_name})
        row.update({"status": "ok", "provider": outcome.result.provider})
        return row

    # --- Local utilities ---

    def handle_distance(self, lat1: float, lon1: float, lat2: float, lon2: float, as_json: bool = False) -> int:
        try:
            km = haversine_km(lat1, lon1, lat2, lon2)
        except InvalidQueryError as e:
            self.ui.display_error(f"Invalid input: {e}")
            return EXIT_INVALID_INPUT
        result = {"km": round(km, 3), "miles": round(km / 1.609344, 3)}
        self._emit(result, as_json, title="Great-circle distance")
        return EXIT_OK

    def handle_weather_code(self, code: int) -> int:
        self.ui.display_output(f"{code}: {describe_weather_code(code)}", markdown=False)
        return EXIT_OK

    def handle_json_to_csv(self, text: str) -> int:
        try:
            csv_text = json_to_csv(text)
        except (json.JSONDecodeError, ValueError) as e:
            self.ui.display_error(f"Cannot convert JSON to CSV: {e}")
            return EXIT_INVALID_INPUT
        self.ui.display_output(csv_text.rstrip("\n"), markdown=False)
        return EXIT_OK

    def handle_csv_to_json(self, text: str, unflatten: bool = False, infer_types: bool = True) -> int:
        records = csv_to_json(text, unflatten=unflatten, infer_types=infer_types)
        self.ui.display_output(json.dumps(records, indent=2, ensure_ascii=False), markdown=False)
        return EXIT_OK

    # --- Skills ---

    def handle_list_skills(self) -> int:
        try:
            skills = self.skill_catalog.list()
        except SkillFormatError as e:
            self.ui.display_error(f"Malformed skill document: {e}")
            return EXIT_LOOKUP_FAILED
        rows: List[Dict[str, Any]] = [{"name": s.name, "description": s.description} for s in skills]
        self.ui.display_table(rows, title="Skills")
        return EXIT_OK

    def handle_show_skill(self, name: str) -> int:
        try:
            skill = self.skill_catalog.get(name)
        except KeyError:
            names = ", ".join(s.name for s in self.skill_catalog.list())
            self.ui.display_error(f"Unknown skill '{name}'.", hint=f"Available skills: {names}")
            return EXIT_INVALID_INPUT
        except SkillFormatError as e:
            self.ui.display_error(f"Malformed skill document: {e}")
            return EXIT_LOOKUP_FAILED
        self.ui.display_output(skill.body, title=f"{skill.name}: {skill.description}")
        return EXIT_OK
