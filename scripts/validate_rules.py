"""
Validate every rule file in a rulesets directory.

Needs the runes package importable: install it first (pip install -e .),
then run `python scripts/validate_rules.py [rules_dir]`.
"""

import os, sys

from runes.rules_loader import validate_directory


def main():
    if len(sys.argv) > 1:
        rd = sys.argv[1]
    else:
        rd = os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), "rulesets")
    if not os.path.isdir(rd):
        print(f"Rules directory not found: {rd}")
        sys.exit(2)
    errors = validate_directory(rd)
    if errors:
        print("Validation FAILED")
        for e in errors:
            print((e["file"], e["error"]))
        sys.exit(2)
    print("All rule files valid.")
    sys.exit(0)

if __name__ == '__main__':
    main()
