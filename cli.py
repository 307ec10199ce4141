"""CncToolSelector command-line interface."""
from __future__ import annotations

import argparse
import os
import sys

EXIT_INVALID_INPUT = 2


def _build_parser():
    parser = argparse.ArgumentParser(
        prog="cnc-tool-selector",
        description="CNC milling tool selection: tool life, cost per part and OEE",
    )
    parser.add_argument("--version", action="version", version="CncToolSelector v0.1.0")
    parser.add_argument("--config", help="YAML configuration file")

    sub = parser.add_subparsers(dest="command")

    calc = sub.add_parser("calculate", help="Evaluate one milling tool set-up")
    calc.add_argument("--workpiece-material", default="steel")
    calc.add_argument("--tool-material", default="carbide")
    calc.add_argument("--coating", default="tin")
    calc.add_argument("--cutting-speed", type=float, default=100.0, help="Vc in m/min")
    calc.add_argument("--feed-per-tooth", type=float, default=0.1, help="fz in mm/tooth")
    calc.add_argument("--depth-of-cut", type=float, default=2.0, help="ap in mm")
    calc.add_argument("--width-of-cut", type=float, default=5.0, help="ae in mm")
    calc.add_argument("--diameter", type=float, default=10.0, help="Tool diameter in mm")
    calc.add_argument("--teeth", type=int, default=4)
    calc.add_argument("--hardness", type=float, default=30.0, help="Workpiece hardness in HRC")
    calc.add_argument("--helix-angle", type=float)
    calc.add_argument("--rake-angle", type=float)
    calc.add_argument("--tool-life", type=float, help="Override the estimated tool life (min)")
    calc.add_argument("--tool-cost", type=float, default=50.0)
    calc.add_argument("--residual-value", type=float, default=0.0)
    calc.add_argument("--processing-time", type=float, default=10.0, help="Minutes per part")
    calc.add_argument("--tool-change-time", type=float, default=2.0)
    calc.add_argument("--tool-change-cost", type=float, default=5.0)
    calc.add_argument("--machining-time", type=float, help="Override total minutes per part")
    calc.add_argument("--hourly-rate", type=float, default=50.0)
    calc.add_argument("--batch-size", type=int, default=1)
    calc.add_argument("--defect-rate", type=float)
    calc.add_argument("--parts-per-year", type=float)
    calc.add_argument("--brand", default="")
    calc.add_argument("--name-model", default="")
    calc.add_argument("--client", default="")
    calc.add_argument("--project", default="")
    calc.add_argument("--part", default="")
    calc.add_argument("--machine", default="")
    calc.add_argument("--output", help="Output directory for reports")
    calc.add_argument("--format", choices=["json", "excel", "pdf", "text", "all"], default="json")

    comp = sub.add_parser("compare", help="Compare every tool in a catalogue file")
    comp.add_argument("file", help="Catalogue file (.csv, .json or .xlsx)")
    comp.add_argument("--output", help="Output directory for reports")
    comp.add_argument("--format", choices=["json", "excel", "pdf", "text", "all"], default="json")

    tmpl = sub.add_parser("template", help="Write a catalogue CSV template")
    tmpl.add_argument("file", help="Destination CSV path")

    return parser


def _activate(config_path=None):
    from cnc_tool_selector.core.config import AppConfig
    from cnc_tool_selector.core.engine import BUILTIN_PLUGINS, load_plugin_class
    from cnc_tool_selector.core.event_bus import EventBus
    from cnc_tool_selector.core.plugin_manager import PluginManager

    config = AppConfig(config_path)
    manager = PluginManager(config=config, event_bus=EventBus())
    for path in BUILTIN_PLUGINS.values():
        manager.register(load_plugin_class(path)())
    for name in BUILTIN_PLUGINS:
        manager.activate(name)
    return manager


def _print_errors(exc) -> int:
    from cnc_tool_selector.core.errors import ParameterValidationError

    print("Input error:", file=sys.stderr)
    messages = exc.messages if isinstance(exc, ParameterValidationError) else [str(exc)]
    for msg in messages:
        print("  - %s" % msg, file=sys.stderr)
    return EXIT_INVALID_INPUT


def _export(reporter, fmt, output_dir, evaluation=None, comparison=None):
    os.makedirs(output_dir, exist_ok=True)
    if fmt == "all":
        paths = reporter.export_all(evaluation, comparison, output_dir)
    else:
        paths = {fmt: reporter.export(fmt, evaluation, comparison, output_dir)}
    for name, path in paths.items():
        print("  %s report: %s" % (name, path))


def _calculate_inputs(args) -> dict:
    inputs = {
        "workpiece_material": args.workpiece_material,
        "tool_material": args.tool_material,
        "tool_coating": args.coating,
        "cutting_speed_m_min": args.cutting_speed,
        "feed_per_tooth_mm": args.feed_per_tooth,
        "depth_of_cut_mm": args.depth_of_cut,
        "width_of_cut_mm": args.width_of_cut,
        "tool_diameter_mm": args.diameter,
        "number_of_teeth": args.teeth,
        "material_hardness_hrc": args.hardness,
        "helix_angle_deg": args.helix_angle,
        "rake_angle_deg": args.rake_angle,
        "tool_life_min": args.tool_life,
        "tool_cost": args.tool_cost,
        "tool_residual_value": args.residual_value,
        "processing_time_min": args.processing_time,
        "tool_change_time_min": args.tool_change_time,
        "tool_change_cost": args.tool_change_cost,
        "machining_time_min": args.machining_time,
        "machine_hourly_rate": args.hourly_rate,
        "batch_size": args.batch_size,
        "brand": args.brand,
        "name_model": args.name_model,
        "project": {"client_name": args.client, "project_name": args.project,
                    "part_name": args.part, "machine_name": args.machine},
    }
    if args.defect_rate is not None:
        inputs["defect_rate_percent"] = args.defect_rate
    if args.parts_per_year is not None:
        inputs["parts_per_year"] = args.parts_per_year
    return inputs


def _do_calculate(args):
    from cnc_tool_selector.core.errors import ComputationError, ParameterValidationError

    manager = _activate(args.config)
    milling = manager.get_plugin("milling")
    try:
        ev = milling.calculate_parameters(_calculate_inputs(args))
    except (ParameterValidationError, ComputationError) as exc:
        return _print_errors(exc)

    cost, oee, tech = ev.cost, ev.oee, ev.technical
    print("=" * 60)
    print("  CNC Tool Selection Result")
    print("=" * 60)
    print("  Evaluation ID: %s" % ev.evaluation_id)
    print("  Tool life:     %s min (%s)" % (ev.tool_life_min,
                                            "override" if ev.tool_life_overridden else "estimated"))
    print()
    print("  --- Cost per Part ---")
    print("  %-26s %10.4f" % ("Total", cost.total_cost_per_part))
    print("  %-26s %10.4f" % ("Tool", cost.tool_cost_per_part))
    print("  %-26s %10.4f" % ("Tool change", cost.tool_change_cost_per_part))
    print("  %-26s %10.4f" % ("Machining", cost.machining_cost_per_part))
    print("  %-26s %10d" % ("Parts per tool life", cost.parts_per_tool_life))
    if cost.batch_size > 1:
        print("  %-26s %10.2f" % ("Batch total (%d)" % cost.batch_size, cost.total_batch_cost))
    print()
    print("  --- Technical Data ---")
    print("  %-26s %10.0f RPM" % ("Spindle speed", tech.spindle_speed_rpm))
    print("  %-26s %10.1f mm/min" % ("Feed rate", tech.feed_rate_mm_min))
    print("  %-26s %10.1f mm3/min" % ("MRR", tech.mrr_mm3_min))
    print("  %-26s %10.1f N" % ("Cutting force", tech.cutting_force_n))
    print("  %-26s %10.3f kW" % ("Power", tech.power_kw))
    print("  %-26s %10.3f Nm" % ("Torque", tech.torque_nm))
    print("  %-26s %10.3f um" % ("Surface finish Ra", tech.surface_finish_um))
    print()
    print("  --- OEE ---")
    print("  %-26s %9.2f%%" % ("OEE", oee.oee))
    print("  %-26s %9.2f%%" % ("Availability", oee.availability))
    print("  %-26s %9.2f%%" % ("Performance", oee.performance))
    print("  %-26s %9.2f%%" % ("Quality", oee.quality))
    print()
    print("  --- Recommendations ---")
    for r in ev.recommendations:
        print("  - [%s] %s" % (r.type, r.message))
    if not ev.recommendations:
        print("  None.")
    print("=" * 60)

    if args.output:
        _export(manager.get_plugin("reporter"), args.format, args.output, evaluation=ev)
    return 0


def _do_compare(args):
    from cnc_tool_selector.core.errors import (
        CatalogueFormatError, ComputationError, ParameterValidationError,
    )

    manager = _activate(args.config)
    catalogue = manager.get_plugin("catalogue")
    aggregator = manager.get_plugin("comparison").aggregator
    try:
        catalogue.import_into(args.file, aggregator)
    except (CatalogueFormatError, ComputationError, ParameterValidationError) as exc:
        return _print_errors(exc)
    except OSError as exc:
        print("Cannot read %s: %s" % (args.file, exc), file=sys.stderr)
        return EXIT_INVALID_INPUT

    print("=" * 60)
    print("  Tool Comparison (%d tools)" % len(aggregator))
    print("=" * 60)
    ranked = sorted(aggregator.entries(), key=lambda e: e.total_cost_per_part)
    for rank, e in enumerate(ranked, 1):
        print("  %2d. %-28s %10.4f/part %6s min %12.1f mm3/min"
              % (rank, e.name, e.total_cost_per_part, e.tool_life_min, e.mrr_mm3_min))
    print()
    print("  Best by cost:  %s" % aggregator.best_by("total_cost_per_part").name)
    print("  Worst by cost: %s" % aggregator.worst_by("total_cost_per_part").name)
    print("  Longest life:  %s" % aggregator.best_by("tool_life_min").name)
    print("  Highest MRR:   %s" % aggregator.best_by("mrr_mm3_min").name)
    savings = aggregator.savings()
    if savings is not None:
        print()
        print("  --- Savings ---")
        print("  Per part:      %.4f (%.1f%% reduction)" % (savings.cost_difference,
                                                          savings.savings_percent))
        print("  Per 100 parts: %.2f" % savings.savings_per_100_parts)
        if savings.annual_savings is not None:
            print("  Annual (%d parts): %.2f" % (savings.annual_parts_estimate,
                                               savings.annual_savings))
    print("=" * 60)

    if args.output:
        _export(manager.get_plugin("reporter"), args.format, args.output, comparison=aggregator)
    return 0


def _do_template(args):
    from cnc_tool_selector.plugins.catalogue.importer import write_template

    path = write_template(args.file)
    print("Catalogue template written to %s" % path)
    return 0


def main(argv=None):
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.command == "calculate":
        return _do_calculate(args)
    elif args.command == "compare":
        return _do_compare(args)
    elif args.command == "template":
        return _do_template(args)
    else:
        parser.print_help()
        return 0


if __name__ == "__main__":
    sys.exit(main())
