"""
Parametric EQ Response - Main Entry Point

Prints the theoretical frequency response of a bundled preset or of a
JSON band file.
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional


def _setup_logging(verbose: bool) -> None:
    """Console logging for the command line."""
    root = logging.getLogger()
    root.setLevel(logging.DEBUG if verbose else logging.WARNING)
    if any(getattr(h, "name", None) == "peq-response" for h in root.handlers):
        return
    handler = logging.StreamHandler()
    handler.set_name("peq-response")
    handler.setFormatter(logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s'))
    root.addHandler(handler)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="peq-response",
        description="Compute the frequency response of a 10-band parametric EQ",
    )
    source = parser.add_mutually_exclusive_group()
    source.add_argument("--preset", default=None,
                        help="Bundled preset name (flat, bass_boost, vocal_clarity)")
    source.add_argument("--bands", type=Path, default=None,
                        help="JSON file with a band list or a state object with 'bands'")
    parser.add_argument("--at", type=float, nargs="+", metavar="HZ",
                        help="Only evaluate at these frequencies")
    parser.add_argument("--points", type=int, default=None, help="Number of grid points")
    parser.add_argument("--min-freq", type=float, default=None, help="Lowest grid frequency (Hz)")
    parser.add_argument("--max-freq", type=float, default=None, help="Highest grid frequency (Hz)")
    parser.add_argument("--sample-rate", type=float, default=None, help="Sample rate (Hz)")
    parser.add_argument("--config", default=None, help="Custom configuration file")
    parser.add_argument("--json", action="store_true", help="Print JSON instead of a table")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    return parser


def _load_state(args: argparse.Namespace, default_preset: str):
    from models.eq_preset import EQState, get_preset, get_preset_by_name

    if args.bands is not None:
        with open(args.bands, 'r', encoding='utf-8') as f:
            data = json.load(f)
        if isinstance(data, list):
            data = {"name": args.bands.stem, "bands": data}
        return EQState.from_dict(data)
    return get_preset(get_preset_by_name(args.preset or default_preset))


def main(argv: Optional[List[str]] = None) -> int:
    """Command line entry point"""
    args = build_parser().parse_args(argv)
    _setup_logging(args.verbose)
    logger = logging.getLogger("peq-response")

    from core.dsp import InvalidArgumentError, ResponseOptions, processor_response, response_at_frequencies
    from services.config_service import ConfigService

    config = ConfigService(args.config)
    try:
        state = _load_state(args, config.get("equalizer.default_preset", "flat"))
        options = ResponseOptions.resolve(
            ResponseOptions.from_config(config),
            num_points=args.points,
            min_freq=args.min_freq,
            max_freq=args.max_freq,
            sample_rate=args.sample_rate,
        )

        if args.at:
            values = response_at_frequencies(state.bands, args.at, options)
            rows = list(zip(args.at, values))
            payload = {"name": state.name, "frequencies": args.at, "magnitudeDb": values}
        else:
            response = processor_response(state, options)
            rows = response.points()
            payload = {"name": state.name, **response.to_dict()}
    except (InvalidArgumentError, OSError, KeyError, TypeError, ValueError) as e:
        logger.error("Failed to compute response: %s", e)
        print(f"error: {e}", file=sys.stderr)
        return 2

    if args.json:
        print(json.dumps(payload, indent=2))
    else:
        print(f"# {state.name}")
        for freq, db in rows:
            print(f"{freq:10.1f} Hz  {db:+7.2f} dB")
    return 0


if __name__ == "__main__":
    sys.exit(main())
