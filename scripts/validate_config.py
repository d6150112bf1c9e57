#!/usr/bin/env python3
"""Configuration validation script."""

import sys
from pathlib import Path
from typing import List

import yaml

# Add the project root to the Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from atlas_app.config.loader import ConfigLoader
from atlas_app.config.validation import ConfigValidator, ValidationError
from atlas_app.errors import ConfigurationError


def validate_symbol_config(loader: ConfigLoader, symbol: str) -> List[ValidationError]:
    """Validate configuration for a specific symbol."""
    config = loader.merge_config(symbol)
    return ConfigValidator.validate_config(config)


def main():
    """Main validation function."""
    print("🔍 Validating Atlas configuration...")

    loader = ConfigLoader.create()

    # Every symbol with overrides, plus one that falls back to defaults
    symbols_file = loader.config_dir / "symbols.yaml"
    symbols = []
    if symbols_file.exists():
        with open(symbols_file) as f:
            symbols = list((yaml.safe_load(f) or {}).get("symbols", {}))
    symbols.append("UNKNOWN-SYMBOL")

    all_valid = True

    for symbol in symbols:
        print(f"\n📊 Validating {symbol}...")

        try:
            errors = validate_symbol_config(loader, symbol)
            if errors:
                print(f"❌ Found {len(errors)} validation errors:")
                for error in errors:
                    print(f"  • {error.field}: {error.message} (value: {error.value})")
                all_valid = False
                continue

            # Rebuild the typed config to catch unknown fields
            loader.load_config(symbol)
            print(f"✅ {symbol} configuration is valid")

        except ConfigurationError as e:
            print(f"❌ Error validating {symbol}: {e}")
            for message in e.errors:
                print(f"  • {message}")
            all_valid = False

    if all_valid:
        print("\n🎉 All configuration validation passed!")
        sys.exit(0)
    else:
        print("\n❌ Configuration validation failed!")
        sys.exit(1)


if __name__ == "__main__":
    main()
