#!/usr/bin/env python3
"""Configuration validation script."""

import sys
from pathlib import Path

from tradeflow.config.loader import CONFIG_FILENAME, ConfigLoader
from tradeflow.config.validation import ConfigValidator


def main() -> int:
    """Main validation function."""
    config_dir = Path(sys.argv[1]) if len(sys.argv) > 1 else None
    loader = ConfigLoader.create(config_dir=config_dir)
    print(f"🔍 Validating {loader.config_dir / CONFIG_FILENAME}...")

    try:
        config = loader.merge_config()
    except Exception as e:
        print(f"❌ Error loading configuration: {e}")
        return 1

    errors = ConfigValidator.validate_config(config)
    if errors:
        print(f"❌ Found {len(errors)} validation errors:")
        for error in errors:
            print(f"  • {error.field}: {error.message} (value: {error.value!r})")
        return 1

    if not config["platform"]["api_url"] or not config["platform"]["api_key"]:
        print("⚠️  Platform URL or API key not set; set RECALL_API_URL and RECALL_API_KEY")

    print("✅ Configuration is valid")
    print(f"  • min_confidence: {config['filter']['min_confidence']}")
    print(f"  • default_amount: {config['execution']['default_amount']}")
    print(f"  • max_trades_per_cycle: {config['execution']['max_trades_per_cycle']}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
