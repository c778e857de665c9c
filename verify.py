#!/usr/bin/env python3
import sys
import argparse
import json
import os
import subprocess
from dataclasses import replace

from fieldmap.schemaloader import SchemaLoader, build_policy
from fieldmap.ingest import JsonParser
from fieldmap import logging as slog
from fieldmap.extractor import extract
from fieldmap.validation import MappingValidationEngine
from fieldmap.reporting.reporting import assemble_report

EXIT_CONFIG = 2
EXIT_STRICT = 3


def _load_config(path: str):
    slog.log_step("Loading config:", path)
    config = SchemaLoader(path).load()
    slog.log_ok(f"Config loaded with {len(config.schema.tables)} table(s), policy '{config.policy_name}'.")
    return config


def _apply_cli_options(options, args):
    overrides = {}
    if args.max_depth is not None:
        overrides["max_depth"] = args.max_depth
    if args.array_limit is not None:
        overrides["array_index_limit"] = args.array_limit
    if args.include_nulls:
        overrides["include_null_values"] = True
    return replace(options, **overrides) if overrides else options


def main() -> int:
    p = argparse.ArgumentParser(
        description="Extract fields from a sample API response and validate field-to-column mappings."
    )
    p.add_argument("-c", "--config",   required=True, help="Path to the YAML target schema/config")
    p.add_argument("-s", "--sample",   required=True, help="Path to the sample response JSON file")
    p.add_argument("-m", "--mappings", help="Path to the mappings JSON file (optional)")
    p.add_argument("-o", "--output-file", default="verification.json", help="Output JSON path")

    p.add_argument("-v", "--verbose", action="count", default=0,
                   help="Increase log verbosity (-v, -vv)")
    p.add_argument("--log-file", default=None, metavar="PATH",
                   help="Also write a timestamped DEBUG log to PATH")
    p.add_argument("--max-depth", type=int, default=None, metavar="N",
                   help="Override defaults.extraction.max_depth")
    p.add_argument("--array-limit", type=int, default=None, metavar="N",
                   help="Override defaults.extraction.array_index_limit (0 = unlimited)")
    p.add_argument("--include-nulls", action="store_true",
                   help="Emit null_value fields for null/undefined values")
    p.add_argument("--print-issues", type=int, default=3, metavar="N",
                   help="Print up to N issues per mapping (default: 3, 0 to disable)")
    p.add_argument("--strict", action="store_true",
                   help="Exit with status 3 when any mapping is in error or missing")
    p.add_argument("-rep", "--report", action="store_true",
                   help="Create an HTML report (results/verification.html) using report_html.py")

    args = p.parse_args()
    slog.setup_logging(args.verbose, args.log_file)

    try:
        config = _load_config(args.config)
        options = _apply_cli_options(config.options, args)
    except (OSError, ValueError) as e:
        slog.log_err(f"Configuration error: {e}")
        return EXIT_CONFIG

    parser = JsonParser()
    slog.log_step("Reading sample JSON:", args.sample)
    sample = parser.load_sample(args.sample)

    slog.log_step("Extracting fields", f"max_depth={options.max_depth} array_limit={options.array_index_limit}")
    extraction = extract(sample, options)
    slog.log_diagnostics(extraction.errors, extraction.warnings)
    st = extraction.statistics
    slog.log_ok(f"Extracted {st.total_fields} top-level field(s) "
                f"({st.object_fields} object, {st.array_fields} array, {st.primitive_fields} primitive).")

    mappings = []
    if args.mappings:
        slog.log_step("Reading mappings JSON:", args.mappings)
        try:
            mappings = parser.load_mappings(args.mappings)
        except (KeyError, TypeError, ValueError) as e:
            slog.log_err(f"Configuration error: {e}")
            return EXIT_CONFIG
        slog.log_ok(f"{len(mappings)} mapping(s) loaded.")

    engine = MappingValidationEngine(build_policy(config))
    vp = engine.validate_now(mappings, extraction.fields, config.schema)
    summary = engine.summary

    for r in vp.results:
        slog.log_status(r.status.value, f"{r.mapping.id}: {r.mapping.source_field.label} → "
                                        f"{r.mapping.target_field.label}")
        issues = [f"missing {m}" for m in r.missing_fields] + list(r.type_mismatches) \
            + [msg for _lvl, msg in r.constraint_issues]
        for line in issues[:max(args.print_issues, 0)]:
            slog.log_info(f"    - {line}")

    final_json = assemble_report(
        extraction=extraction,
        summary=summary,
        results=vp.results,
        sample_name=os.path.basename(args.sample),
        config_name=os.path.basename(args.config),
    )

    slog.log_step("Writing output JSON:", args.output_file)
    with open(args.output_file, "w", encoding="utf-8") as f:
        json.dump(final_json, f, indent=2, ensure_ascii=False)

    if args.report:
        slog.log_ok("Generating HTML report")
        report_script = os.path.join(os.path.dirname(__file__), "report_html.py")
        if not os.path.exists(report_script):
            report_script = "report_html.py"

        try:
            subprocess.run(
                [sys.executable, report_script, "-v", args.output_file, "-o", "verification.html"],
                check=True
            )
            slog.log_ok("HTML report written to results/verification.html")
        except subprocess.CalledProcessError as e:
            slog.log_err(f"Failed to build HTML report: {e}")
    else:
        slog.log_info("Report generation skipped (use -rep/--report to enable).")

    slog.log_status(summary.status, f"{summary.total} mapping(s) validated")
    if summary.status == "error":
        slog.log_warn(f"Validation finished with {len(summary.errors)} error(s).")
        if args.strict:
            return EXIT_STRICT
    slog.log_ok("Done.")
    return 0


if __name__ == "__main__":
    try:
        sys.exit(main())
    except Exception as e:
        from fieldmap import logging as slog
        slog.log_err(f"Error: {e}")
        sys.exit(1)
