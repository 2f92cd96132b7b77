"""
Material Rule Engine - CLI Entry Point

Commands:
    validate  - Validate a rule set file and check its quantity expressions
    run       - Compute a material list for a features file
    builtins  - List built-in rule sets
"""

import argparse
import json
import logging
import sys
from pathlib import Path

import yaml

from .config import EngineConfig
from .engine import RulesEngine
from .errors import ExpressionEvaluationError, FeatureValidationError, RuleSetNotFoundError, RuleSetValidationError
from .expression import parse
from .materials import MaterialListExporter, PriceCatalog
from .repositories import DirectoryRuleSetRepository
from .ruleset import list_builtin_rule_sets, load_builtin_rule_set, load_rule_set_file
from .ruleset.builtins import BUILTIN_RULE_SETS


def setup_logging(verbose: bool = False):
    """Setup logging configuration."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(levelname)s - %(message)s'
    )


def load_features_file(path: Path) -> list:
    """Features file: JSON or YAML, a list of records or {features: [...]}."""
    with open(path, encoding="utf-8") as f:
        if path.suffix.lower() == ".json":
            data = json.load(f)
        else:
            data = yaml.safe_load(f)
    if isinstance(data, dict):
        data = data.get("features")
    if not isinstance(data, list):
        raise FeatureValidationError(f"Features file must contain a list of features: {path}")
    return data


def resolve_rule_set(name_or_path: str, config: EngineConfig):
    """A rule set file path, a rule set id in config.rules_dir, or a built-in name."""
    path = Path(name_or_path)
    if path.is_file():
        return load_rule_set_file(path)
    if config.rules_dir:
        try:
            return DirectoryRuleSetRepository(config.rules_dir).get_by_id(name_or_path)
        except RuleSetNotFoundError:
            pass
    if name_or_path in list_builtin_rule_sets():
        return load_builtin_rule_set(name_or_path)
    raise RuleSetNotFoundError(name_or_path)


def cmd_validate(args):
    """Validate a rule set file."""
    try:
        rule_set = load_rule_set_file(Path(args.rules))
    except RuleSetValidationError as e:
        print(f"INVALID: {e}")
        return 1

    bad = 0
    for i, rule in enumerate(rule_set.rules):
        for j, template in enumerate(rule.materials):
            try:
                parse(template.qty)
            except ExpressionEvaluationError as e:
                print(f"rules[{i}].materials[{j}].qty: {e}")
                bad += 1

    if bad:
        print(f"INVALID: {bad} quantity expression(s) do not parse")
        return 1

    templates = sum(len(r.materials) for r in rule_set.rules)
    print(f"OK: version {rule_set.version}, {len(rule_set.rules)} rules, {templates} material templates")
    return 0


def cmd_run(args):
    """Compute a material list for a features file."""
    config = EngineConfig.from_yaml(args.config) if args.config else EngineConfig()
    if args.workers:
        config.max_workers = args.workers
    price_catalog = None
    if args.prices == "builtin":
        price_catalog = PriceCatalog.builtin()
    elif args.prices:
        config.pricing_path = args.prices

    features_path = Path(args.features)
    job_id = args.job_id or features_path.stem

    try:
        rule_set = resolve_rule_set(args.rules or config.default_rule_set, config)
        features = load_features_file(features_path)
        result = RulesEngine(config, price_catalog).run(rule_set, features)
    except RuleSetNotFoundError as e:
        print(f"ERROR: {e}")
        return 1
    except (RuleSetValidationError, FeatureValidationError) as e:
        print(f"INVALID: {e}")
        return 1

    paths = MaterialListExporter().export_all(job_id, result, Path(args.output))

    print(f"\n{'='*60}")
    print(f"MATERIAL LIST: {job_id}")
    print(f"{'='*60}")
    print(f"Features: {len(features)}")
    print(f"Material lines: {len(result.line_items)}")
    print(f"Skipped templates: {len(result.warnings)}")
    if result.total_value:
        print(f"Priced value: {result.total_value:,.2f}")
    print(f"\nOutputs: {Path(args.output) / job_id}/")
    for path in paths.values():
        print(f"  - {path.name}")

    return 0


def cmd_builtins(args):
    """List built-in rule sets."""
    for name in list_builtin_rule_sets():
        display, version = BUILTIN_RULE_SETS[name]
        print(f"{name:24s} {display} (v{version})")
    return 0


def main(argv=None):
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Material Rule Engine",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Check a rule set
  python -m takeoff_rules validate --rules rules.yaml

  # Material list with the built-in commercial rules
  python -m takeoff_rules run --rules standard_commercial --features job42.json --output ./out

  # Priced, on 4 worker threads
  python -m takeoff_rules run --rules rules.yaml --features job42.yaml --prices prices.yaml --workers 4
        """
    )

    parser.add_argument('-v', '--verbose', action='store_true',
                        help='Enable verbose logging')

    subparsers = parser.add_subparsers(dest='command', help='Commands')

    # Validate command
    validate_parser = subparsers.add_parser('validate', help='Validate a rule set file')
    validate_parser.add_argument('--rules', '-r', required=True,
                                 help='Rule set file (YAML or JSON)')
    validate_parser.set_defaults(func=cmd_validate)

    # Run command
    run_parser = subparsers.add_parser('run', help='Compute a material list')
    run_parser.add_argument('--rules', '-r',
                            help='Rule set file or built-in name (default from config)')
    run_parser.add_argument('--features', '-f', required=True,
                            help='Features file (YAML or JSON)')
    run_parser.add_argument('--output', '-o', default='./out',
                            help='Output directory')
    run_parser.add_argument('--job-id',
                            help='Job id (default: features file name)')
    run_parser.add_argument('--config', '-c',
                            help='Engine config YAML')
    run_parser.add_argument('--prices',
                            help="Price catalog YAML, or 'builtin'")
    run_parser.add_argument('--workers', type=int,
                            help='Worker threads for per-feature matching')
    run_parser.set_defaults(func=cmd_run)

    # Builtins command
    builtins_parser = subparsers.add_parser('builtins', help='List built-in rule sets')
    builtins_parser.set_defaults(func=cmd_builtins)

    args = parser.parse_args(argv)

    setup_logging(args.verbose)

    if args.command:
        return args.func(args)
    else:
        parser.print_help()
        return 0


if __name__ == "__main__":
    sys.exit(main())
