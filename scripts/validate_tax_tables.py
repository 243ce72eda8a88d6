"""Validate every tax-year policy file without starting the service."""

import argparse
import logging
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from config.settings import settings
from sa_tax.calculators.errors import PolicyConfigurationError

logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")
logger = logging.getLogger(__name__)


def main() -> int:
    """Load the policy directory and report each year, or the first error."""
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("directory", nargs="?", type=Path, default=settings.tax_years_path)
    args = parser.parse_args()

    try:
        # Imported here so a broken default table is reported, not raised.
        from sa_tax.calculators.tax_data import load_tax_years

        policies = load_tax_years(args.directory)
    except PolicyConfigurationError as exc:
        logger.error("Invalid tax tables: %s", exc)
        return 1

    for label, policy in sorted(policies.items()):
        logger.info(
            "%s: %s to %s, %d brackets, primary rebate %s",
            label,
            policy.start_date,
            policy.end_date,
            len(policy.brackets),
            policy.rebates.primary,
        )
    logger.info("Validated %d tax years.", len(policies))
    return 0


if __name__ == "__main__":
    sys.exit(main())
