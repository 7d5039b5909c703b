# Copyright 2026 Specimen Contributors
# SPDX-License-Identifier: Apache-2.0

"""Entry point for the Specimen command-line interface."""

import argparse
import logging
import random
import re
import sys
from pathlib import Path
from typing import Any, NamedTuple

from specimen.engine.artifact import ARTIFACT_SUFFIX, serialize, write_artifact
from specimen.engine.build import InstanceSet, build_instance_set, build_list_instance_set
from specimen.engine.derivation import derive_graph
from specimen.engine.errors import GenerationError, ProviderPoolEmptyError
from specimen.engine.overrides import OverrideTable, collect_overrides
from specimen.engine.render import RenderError, render_module
from specimen.engine.synthesis import GenerationPolicy
from specimen.markers.declarations import generatable_spec
from specimen.model.records import ConstructionPlan
from specimen.validation.checks import validate
from specimen.workspace.config import (
    CONFIG_FILE_NAME,
    WorkspaceConfig,
    WorkspaceConfigError,
    default_config_text,
    load_workspace_config,
)
from specimen.workspace.imports import TypeReferenceError, importable_from, resolve_reference
from specimen.workspace.logs import configure_logging

logger = logging.getLogger(__name__)

# ###############
# Public Interface
# ###############


def main(argv: list[str] | None = None) -> None:
    """Run the Specimen CLI."""
    parser = argparse.ArgumentParser(
        prog="specimen",
        description="Specimen: synthetic fixtures from type declarations",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Log debug output to stderr")
    subparsers = parser.add_subparsers(dest="command", metavar="COMMAND")

    # init subcommand
    init_parser = subparsers.add_parser(
        "init",
        help="Initialize a new Specimen workspace",
        description=f"Create a {CONFIG_FILE_NAME} file in a directory.",
    )
    init_parser.add_argument(
        "directory",
        nargs="?",
        default=".",
        help="Directory to initialize the workspace in (default: current directory)",
    )

    # check subcommand
    check_parser = subparsers.add_parser(
        "check",
        help="Check that every configured target can be generated",
        description="Derive every configured target and report all problems.",
    )
    check_parser.add_argument(
        "directory",
        nargs="?",
        default=".",
        help="Directory containing the Specimen workspace (default: current directory)",
    )

    # generate subcommand
    generate_parser = subparsers.add_parser(
        "generate",
        help="Write fixture modules for every configured target",
        description="Generate every configured target and write one Python module per target.",
    )
    generate_parser.add_argument(
        "directory",
        nargs="?",
        default=".",
        help="Directory containing the Specimen workspace (default: current directory)",
    )

    # show subcommand
    show_parser = subparsers.add_parser(
        "show",
        help="Print generated instances of a single type",
        description="Generate instances of one type and print them.",
    )
    show_parser.add_argument("type", help="Type to generate, as module:Qualname")
    show_parser.add_argument("--count", type=int, default=None, help="Number of instances (default: pool size)")
    show_parser.add_argument("--seed", type=int, default=None, help="Seed for the random generator")
    show_parser.add_argument(
        "--format",
        choices=["python", "json"],
        default="python",
        help="Output format (default: python)",
    )
    show_parser.add_argument(
        "--directory",
        default=".",
        help="Workspace whose overrides and settings apply (default: current directory)",
    )

    args = parser.parse_args(argv)
    configure_logging(args.verbose)
    if args.command is None:
        parser.print_help()
        sys.exit(0)

    sys.exit(_dispatch(args))


# ################
# Implementation
# ################


def _dispatch(args: argparse.Namespace) -> int:
    """Dispatch to the appropriate subcommand handler."""
    if args.command == "init":
        return _cmd_init(args)
    if args.command == "check":
        return _cmd_check(args)
    if args.command == "generate":
        return _cmd_generate(args)
    if args.command == "show":
        return _cmd_show(args)
    return 0


def _cmd_init(args: argparse.Namespace) -> int:
    """Handle the init subcommand."""
    directory = Path(args.directory).resolve()

    if not directory.exists():
        print(f"Error: directory '{directory}' does not exist.", file=sys.stderr)
        return 1

    config_file = directory / CONFIG_FILE_NAME
    if config_file.exists():
        print(f"Error: workspace already exists at '{config_file}'.", file=sys.stderr)
        return 1

    config_file.write_text(default_config_text(), encoding="utf-8")
    print(f"Initialized Specimen workspace at '{config_file}'.")
    return 0


def _cmd_check(args: argparse.Namespace) -> int:
    """Handle the check subcommand."""
    directory = Path(args.directory).resolve()
    config = _load_config(directory)
    if config is None:
        return 1

    with importable_from(directory):
        overrides = _load_overrides(config)
        if overrides is None:
            return 1
        if not config.targets:
            print("No targets configured in the workspace.")
            return 0

        print(f"Checking {len(config.targets)} target(s)...")
        has_errors = False
        for target in config.targets:
            try:
                root = resolve_reference(target.type)
            except TypeReferenceError as exc:
                print(f"Error: {exc}", file=sys.stderr)
                has_errors = True
                continue
            logger.info("Checking target", extra={"target": target.type})
            graph = derive_graph(root, overrides=overrides, pooled_root=target.list_count is not None)
            for diagnostic in graph.errors:
                print(f"Error: {diagnostic.message}", file=sys.stderr)
                has_errors = True
            result = validate(graph)
            for warning in result.warnings:
                print(f"Warning: {warning.message}")
            for error in result.errors:
                print(f"Error: {error.message}", file=sys.stderr)
                has_errors = True

    if has_errors:
        return 1

    print("No issues found.")
    return 0


def _cmd_generate(args: argparse.Namespace) -> int:
    """Handle the generate subcommand.

    Every target is built and rendered before anything is written, so a run
    with any failing target leaves the output directory untouched.
    """
    directory = Path(args.directory).resolve()
    config = _load_config(directory)
    if config is None:
        return 1

    output_dir = directory / config.output_directory
    rng = random.Random(config.seed)
    policy = _policy(config)

    with importable_from(directory):
        overrides = _load_overrides(config)
        if overrides is None:
            return 1
        if not config.targets:
            print("No targets configured in the workspace.")
            return 0

        pending: list[_Output] = []
        has_errors = False
        for target in config.targets:
            try:
                root = resolve_reference(target.type)
                count = target.count if target.count is not None else _default_count(root)
                logger.info("Generating %d value(s)", count, extra={"target": target.type})
                outputs = [("values", build_instance_set(root, count, overrides=overrides, rng=rng, policy=policy))]
                if target.list_count is not None:
                    lists = build_list_instance_set(
                        root, target.list_count, overrides=overrides, rng=rng, policy=policy
                    )
                    outputs.append(("lists", lists))
                pending.extend(_render_output(instance_set, output_dir, suffix) for suffix, instance_set in outputs)
            except (TypeReferenceError, GenerationError, ProviderPoolEmptyError, RenderError, ValueError) as exc:
                print(f"Error: {target.type}: {exc}", file=sys.stderr)
                has_errors = True

    if has_errors:
        print("No files written.", file=sys.stderr)
        return 1
    for output in pending:
        _write_output(output)
    return 0


def _cmd_show(args: argparse.Namespace) -> int:
    """Handle the show subcommand."""
    directory = Path(args.directory).resolve()
    config: WorkspaceConfig | None = None
    if (directory / CONFIG_FILE_NAME).exists():
        config = _load_config(directory)
        if config is None:
            return 1

    seed = args.seed if args.seed is not None else (config.seed if config is not None else None)
    with importable_from(directory):
        overrides = _load_overrides(config) if config is not None else OverrideTable()
        if overrides is None:
            return 1
        try:
            root = resolve_reference(args.type)
            count = args.count if args.count is not None else _default_count(root)
            instance_set = build_instance_set(
                root,
                count,
                overrides=overrides,
                rng=random.Random(seed),
                policy=_policy(config),
            )
            if args.format == "json":
                print(serialize(instance_set.plan()))
            else:
                print(render_module(instance_set), end="")
        except (TypeReferenceError, GenerationError, ProviderPoolEmptyError, RenderError, ValueError) as exc:
            print(f"Error: {exc}", file=sys.stderr)
            return 1
    return 0


def _load_config(directory: Path) -> WorkspaceConfig | None:
    """Load the workspace configuration, printing an error and returning None on failure."""
    if not directory.exists():
        print(f"Error: directory '{directory}' does not exist.", file=sys.stderr)
        return None

    config_file = directory / CONFIG_FILE_NAME
    if not config_file.exists():
        print(
            f"Error: no Specimen workspace found at '{directory}'. Run 'specimen init' to initialize a workspace.",
            file=sys.stderr,
        )
        return None

    try:
        return load_workspace_config(config_file)
    except WorkspaceConfigError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return None


def _load_overrides(config: WorkspaceConfig) -> OverrideTable | None:
    """Resolve and check the configured value sources, printing every problem."""
    sources: list[Any] = []
    failed = False
    for reference in config.overrides:
        try:
            sources.append(resolve_reference(reference))
        except TypeReferenceError as exc:
            print(f"Error: {exc}", file=sys.stderr)
            failed = True
    if failed:
        return None
    try:
        return collect_overrides(sources)
    except GenerationError as exc:
        for diagnostic in exc.diagnostics:
            print(f"Error: {diagnostic.message}", file=sys.stderr)
        return None


def _policy(config: WorkspaceConfig | None) -> GenerationPolicy:
    if config is None or config.null_probability is None:
        return GenerationPolicy()
    return GenerationPolicy(null_probability=config.null_probability)


def _default_count(root: Any) -> int:
    spec = generatable_spec(root)
    return spec.count if spec is not None else 1


class _Output(NamedTuple):
    module_path: Path
    source: str
    plan_path: Path
    plan: ConstructionPlan
    instance_set: InstanceSet


def _render_output(instance_set: InstanceSet, output_dir: Path, suffix: str) -> _Output:
    stem = f"{_module_stem(instance_set.root)}_{suffix}"
    return _Output(
        module_path=output_dir / f"{stem}.py",
        source=render_module(instance_set),
        plan_path=output_dir / f"{stem}{ARTIFACT_SUFFIX}",
        plan=instance_set.plan(),
        instance_set=instance_set,
    )


def _write_output(output: _Output) -> None:
    output.module_path.parent.mkdir(parents=True, exist_ok=True)
    output.module_path.write_text(output.source, encoding="utf-8")
    write_artifact(output.plan, output.plan_path)
    root = output.instance_set.root
    logger.info("Wrote %s", output.module_path, extra={"target": root})
    print(f"  {root}: wrote {len(output.instance_set)} value(s) to '{output.module_path}'")


def _module_stem(type_id: str) -> str:
    qualname = type_id.split(":", 1)[-1].replace(".", "_")
    return re.sub(r"(?<=[a-z0-9])(?=[A-Z])", "_", qualname).lower()
