"""Command-line entry point: run one audit and print the result JSON."""

import argparse
import json
import logging
import sys

from dotenv import load_dotenv

from hostaudit.core.audit import run_audit
from hostaudit.errors.exceptions import AuditError, ValidationError
from hostaudit.services.validators import extract_domain, validate_url


def _fail(message: str) -> None:
    print(json.dumps({"status": "failed", "error": message}))
    sys.exit(1)


def main(argv: list[str] | None = None) -> None:
    """Run a site audit and output JSON to stdout."""
    parser = argparse.ArgumentParser(description="Direct-booking website audit")
    parser.add_argument("url", nargs="?", help="URL to audit")
    parser.add_argument("--domain", help="Domain for SEO lookups (default: derived from URL)")
    parser.add_argument(
        "--validate-only",
        action="store_true",
        help="Validate inputs without running audit",
    )
    parser.add_argument("--verbose", action="store_true", help="Log progress to stderr")

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )

    try:
        load_dotenv()

        if not args.url:
            raise ValidationError("URL is required")

        url = validate_url(args.url)
        domain = extract_domain(args.domain or url)

        if args.validate_only:
            print(
                json.dumps(
                    {
                        "status": "success",
                        "message": "Validation successful",
                        "validated_url": url,
                        "domain": domain,
                    }
                )
            )
            return

        def on_progress(percent: int, step: str) -> None:
            logging.getLogger(__name__).info(f"[{percent:3d}%] {step}")

        result = run_audit(url, domain=domain, on_progress=on_progress)
        print(json.dumps(result.to_json_dict(), indent=2))

    except ValidationError as e:
        _fail(f"Validation error: {str(e)}")
    except AuditError as e:
        _fail(str(e))


if __name__ == "__main__":
    main()
