from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional, Sequence

from dotenv import load_dotenv

from security_gate.errors import GateError
from security_gate.gate.config import get_gate_config
from security_gate.gate.runner import GateResult, run_gate
from security_gate.qa.schemas import ExitCode
from security_gate.reporting.reporter import print_summary

logger = logging.getLogger(__name__)


def _parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="security-gate",
        description="Evaluate SCA, image and secret scan reports against the gate policy.",
    )
    parser.add_argument("--config", help="YAML gate config (default: bundled config)")
    parser.add_argument("--sca-report")
    parser.add_argument("--image-report")
    parser.add_argument("--secret-report")
    parser.add_argument("--max-critical", type=int)
    parser.add_argument("--max-high", type=int)
    parser.add_argument("--json-output", help="Write the verdict as JSON to this path")
    parser.add_argument(
        "--show-notes",
        action="store_true",
        help="List sub-threshold findings when the gate passes",
    )
    parser.add_argument("--verbose", action="store_true")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = _parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )
    load_dotenv()

    try:
        config = get_gate_config(path=Path(args.config) if args.config else None)
        config = config.with_overrides(
            sca=args.sca_report,
            image=args.image_report,
            secret=args.secret_report,
            max_critical=args.max_critical,
            max_high=args.max_high,
        )
        result = run_gate(config)
        print_summary(result, show_notes=args.show_notes)
        if args.json_output:
            _write_verdict(Path(args.json_output), result)
    except GateError as exc:
        print(f"Security gate execution error: {exc}", file=sys.stderr)
        return int(ExitCode.EXECUTION_ERROR)
    except Exception as exc:
        # Anything unexpected is a broken gate, never a policy failure.
        logger.exception("Unexpected security gate failure")
        print(f"Security gate execution error: {exc!r}", file=sys.stderr)
        return int(ExitCode.EXECUTION_ERROR)

    return int(result.verdict.exit_code)


def _write_verdict(output: Path, result: GateResult) -> None:
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(result.verdict.model_dump_json(indent=2), encoding="utf-8")
    logger.info("Wrote verdict to %s", output)


if __name__ == "__main__":
    raise SystemExit(main())
