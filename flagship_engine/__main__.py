import argparse
import json
import logging
import sys
from pathlib import Path

from .default_params import DEFAULT_SCENARIO, SCENARIO_PRESETS, preset_parameters
from .models import ParameterSet, merge_parameters
from .projections import DISCOUNT_RATE, PROJECTION_YEARS, build_financial_summary
from .tables import projection_frame, summary_frame
from .validation import ConfigurationError

logger = logging.getLogger("flagship_engine")


def _parse_args(argv):
    p = argparse.ArgumentParser(
        prog="flagship_engine",
        description="Flagship school 10-year financial projection",
    )
    p.add_argument(
        "--scenario",
        default=DEFAULT_SCENARIO,
        choices=sorted(SCENARIO_PRESETS),
        help=f"Preset to start from (default: {DEFAULT_SCENARIO}).",
    )
    p.add_argument(
        "--params",
        default=None,
        help="JSON file with parameter edits (camelCase or snake_case) merged over the preset.",
    )
    p.add_argument("--years", type=int, default=PROJECTION_YEARS)
    p.add_argument("--discount-rate", type=float, default=DISCOUNT_RATE)
    p.add_argument("--format", dest="fmt", choices=["json", "table"], default="json")
    p.add_argument("-v", "--verbose", action="store_true", help="Log at INFO level.")
    return p.parse_args(argv)


def load_parameters(scenario: str, params_path=None) -> ParameterSet:
    params = preset_parameters(scenario)
    if params_path:
        path = Path(params_path)
        try:
            edits = json.loads(path.read_text(encoding="utf-8") or "{}")
        except (OSError, json.JSONDecodeError) as e:
            raise ConfigurationError(f"{path}: {e}") from e
        if not isinstance(edits, dict):
            raise ConfigurationError(f"{path}: expected a JSON object")
        params = merge_parameters(params, edits)
        logger.info("Applied %d parameter edits from %s", len(edits), path)
    return params


def main(argv=None) -> int:
    ns = _parse_args(argv)
    logging.basicConfig(
        level=logging.INFO if ns.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        params = load_parameters(ns.scenario, ns.params)
        result = build_financial_summary(params, years=ns.years, discount_rate=ns.discount_rate)
    except ConfigurationError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 2

    if ns.fmt == "json":
        print(json.dumps(result, ensure_ascii=False, indent=2))
    else:
        print(projection_frame(result["projection"]).to_string())
        print()
        print(summary_frame(result["summary"]).to_string(index=False))
    return 0


if __name__ == "__main__":
    sys.exit(main())
