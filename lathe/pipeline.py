"""
Lathe Pipeline - Runs a recipe against a project tree

Steps run one after another against the same tree. The first step that
raises aborts the rest; nothing is rolled back, so the tree is left as the
failing step found it and the host decides whether to keep it.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from lathe.config import LatheConfig
from lathe.errors import LatheError
from lathe.logging_config import logger
from lathe.recipe import Recipe, StepContext
from lathe.symbols import SymbolIndex
from lathe.tree import ProjectTree, TreeChanges


@dataclass
class StepResult:
    """Outcome of one pipeline step."""

    index: int
    op: str
    summary: str


@dataclass
class PipelineResult:
    """Result of running a recipe."""

    steps: list[StepResult] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)
    changes: TreeChanges | None = None
    saved: bool = False

    @property
    def success(self) -> bool:
        return len(self.errors) == 0


class Pipeline:
    """
    Applies the steps of a rendered recipe, in order, to one tree.

    The recipe should already be rendered (see ``Recipe.render``); the
    pipeline does not interpolate parameters itself.
    """

    def __init__(
        self,
        recipe: Recipe,
        config: LatheConfig | None = None,
        index: SymbolIndex | None = None,
    ):
        self.recipe = recipe
        self.config = config or LatheConfig()
        self.index = index or SymbolIndex.from_config(self.config)

    def run(self, tree: ProjectTree) -> PipelineResult:
        """
        Run every step against ``tree``.

        Returns:
            PipelineResult; on failure ``errors`` names the failing step and
            ``steps`` lists the ones that completed before it
        """
        result = PipelineResult()
        ctx = StepContext(
            index=self.index,
            config=self.config,
            parameters=dict(self.recipe.parameters),
        )

        for i, step in enumerate(self.recipe.steps, start=1):
            logger.info(f"[{i}/{len(self.recipe.steps)}] {step.op}")
            try:
                summary = step.apply(tree, ctx)
            except LatheError as e:
                logger.error(f"Step {i} ({step.op}) failed: {e}")
                result.errors.append(f"step {i} ({step.op}): {e}")
                break
            result.steps.append(StepResult(index=i, op=step.op, summary=summary))

        result.changes = tree.changes()
        return result


# ═══════════════════════════════════════════════════════════════════════════
# PUBLIC API
# ═══════════════════════════════════════════════════════════════════════════


def run_recipe(
    recipe: Recipe | str | Path,
    project_dir: str | Path,
    overrides: dict[str, Any] | None = None,
    config: LatheConfig | None = None,
    dry_run: bool = False,
    keep_partial: bool = False,
) -> PipelineResult:
    """
    Load a project from disk, transform it with a recipe and save it back.

    Args:
        recipe: Recipe object, YAML string, or path to a YAML file
        project_dir: Directory holding the instantiated skeleton
        overrides: Parameter values replacing the recipe's own
        config: Engine configuration
        dry_run: Compute changes without writing anything
        keep_partial: Save the tree even if a step failed

    Returns:
        PipelineResult with per-step summaries, errors and the change set
    """
    # Multi-line strings are YAML; anything else is a path
    if isinstance(recipe, Path) or (isinstance(recipe, str) and "\n" not in recipe):
        recipe = Recipe.from_file(recipe)
    elif isinstance(recipe, str):
        recipe = Recipe.from_yaml(recipe)

    config = config or LatheConfig()
    rendered = recipe.render(overrides)
    tree = ProjectTree.from_directory(project_dir, name=rendered.name, config=config)

    result = Pipeline(rendered, config).run(tree)

    if dry_run:
        return result
    if result.success or keep_partial:
        tree.save()
        result.saved = True
    return result
