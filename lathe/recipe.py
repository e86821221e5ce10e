"""
Lathe Recipe Models - Pydantic models for lathe.yaml

A recipe names the project, declares its parameters and lists the steps
to run, in order. String values in steps may reference parameters with
Jinja2 syntax (``{{ artifactId }}``); ``Recipe.render`` resolves them.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, Field, ValidationError, field_validator

from lathe import operations
from lathe.config import LatheConfig
from lathe.errors import RecipeError
from lathe.rename import RenameSpec
from lathe.symbols import SymbolIndex
from lathe.templating import render_string
from lathe.text import check_pattern
from lathe.tree import ProjectTree


@dataclass
class StepContext:
    """What a step needs besides the tree."""

    index: SymbolIndex
    config: LatheConfig = field(default_factory=LatheConfig)
    parameters: dict[str, Any] = field(default_factory=dict)


# ═══════════════════════════════════════════════════════════════════════════
# CORE STEPS
# ═══════════════════════════════════════════════════════════════════════════


class ReplaceContentStep(BaseModel):
    """Overwrite a whole file"""

    op: Literal["replaceFileContent"]
    path: str
    text: str

    def apply(self, tree: ProjectTree, ctx: StepContext) -> str:
        operations.replace_file_content(tree, self.path, self.text)
        return f"rewrote {self.path}"


class LiteralReplaceStep(BaseModel):
    """Replace every occurrence of a literal in one file"""

    op: Literal["literalReplace"]
    path: str
    literal: str = Field(min_length=1)
    replacement: str

    def apply(self, tree: ProjectTree, ctx: StepContext) -> str:
        n = operations.literal_replace(tree, self.path, self.literal, self.replacement)
        return f"{n} replacement(s) in {self.path}"


class RegexReplaceStep(BaseModel):
    """Regex substitution in one file (first match unless count is 0)"""

    op: Literal["regexReplace"]
    path: str
    pattern: str
    replacement: str
    count: int = Field(1, ge=0)

    @field_validator("pattern")
    @classmethod
    def safe_pattern(cls, v: str) -> str:
        check_pattern(v)
        return v

    def apply(self, tree: ProjectTree, ctx: StepContext) -> str:
        n = operations.regex_replace(tree, self.path, self.pattern, self.replacement, self.count)
        return f"{n} match(es) in {self.path}"


class DeleteFilesStep(BaseModel):
    """Delete files by path"""

    op: Literal["deleteFiles"]
    paths: list[str]
    missing_ok: bool = Field(False, alias="missingOk")

    model_config = {"populate_by_name": True}

    def apply(self, tree: ProjectTree, ctx: StepContext) -> str:
        deleted = operations.delete_files(tree, self.paths, missing_ok=self.missing_ok)
        return f"deleted {len(deleted)} file(s)"


class UpdateManifestStep(BaseModel):
    """Set the five manifest coordinates"""

    op: Literal["updateManifest"]
    artifact_id: str = Field(alias="artifactId")
    group_id: str = Field(alias="groupId")
    project_name: str = Field(alias="name")
    version: str
    description: str
    path: str | None = None  # Defaults to config.manifest_path

    model_config = {"populate_by_name": True}

    def apply(self, tree: ProjectTree, ctx: StepContext) -> str:
        path = self.path or ctx.config.manifest_path
        operations.update_manifest(
            tree,
            self.artifact_id,
            self.group_id,
            self.project_name,
            self.version,
            self.description,
            path=path,
        )
        return f"{path} -> {self.group_id}:{self.artifact_id}:{self.version}"


class MovePackageStep(RenameSpec):
    """Move a source package"""

    op: Literal["movePackage"]

    def apply(self, tree: ProjectTree, ctx: StepContext) -> str:
        moved = operations.move_package(tree, self.old, self.new, ctx.index)
        return f"moved {len(moved)} file(s) to {self.new}"


class RenameClassStep(RenameSpec):
    """Rename types structurally, then the literal everywhere"""

    op: Literal["renameClass"]

    def apply(self, tree: ProjectTree, ctx: StepContext) -> str:
        renamed = operations.rename_class(tree, self.old, self.new, ctx.index)
        return f"renamed {len(renamed)} type(s)"


class RenderTemplateStep(BaseModel):
    """Render a packaged template into a file"""

    op: Literal["renderTemplate"]
    path: str
    template: str
    context: dict[str, Any] = {}

    def apply(self, tree: ProjectTree, ctx: StepContext) -> str:
        context = {"project_name": tree.name, **ctx.parameters, **self.context}
        operations.render_template(tree, self.path, self.template, context)
        return f"rendered {self.template} -> {self.path}"


# ═══════════════════════════════════════════════════════════════════════════
# SKELETON CLEAN-UP STEPS
# ═══════════════════════════════════════════════════════════════════════════


class CleanReadmeStep(BaseModel):
    """Replace the skeleton README with one for the new project"""

    op: Literal["cleanReadme"]
    description: str
    owner: str
    path: str = "README.md"

    def apply(self, tree: ProjectTree, ctx: StepContext) -> str:
        operations.clean_readme(tree, self.description, self.owner, self.path)
        return f"rewrote {self.path}"


class CleanChangelogStep(BaseModel):
    """Drop the template release history and rename its links"""

    op: Literal["cleanChangelog"]
    owner: str
    path: str = "CHANGELOG.md"
    baseline: str = operations.BASELINE_VERSION
    template_name: str = Field(operations.TEMPLATE_PROJECT_NAME, alias="templateName")
    template_owner: str = Field(operations.TEMPLATE_OWNER, alias="templateOwner")

    model_config = {"populate_by_name": True}

    def apply(self, tree: ProjectTree, ctx: StepContext) -> str:
        operations.clean_changelog(
            tree,
            self.owner,
            path=self.path,
            baseline=self.baseline,
            template_name=self.template_name,
            template_owner=self.template_owner,
        )
        return f"reset {self.path} to {self.baseline}"


class UpdateCiConfigStep(BaseModel):
    """Put the artifact id into the CI config"""

    op: Literal["updateCiConfig"]
    artifact_id: str = Field(alias="artifactId")
    path: str = ".circleci/config.yml"
    placeholder: str = operations.TEMPLATE_ARTIFACT_ID

    model_config = {"populate_by_name": True}

    def apply(self, tree: ProjectTree, ctx: StepContext) -> str:
        n = operations.update_ci_config(tree, self.artifact_id, self.path, self.placeholder)
        return f"{n} replacement(s) in {self.path}"


class RemoveUnnecessaryFilesStep(BaseModel):
    """Delete template-only files that are present"""

    op: Literal["removeUnnecessaryFiles"]
    paths: list[str] = list(operations.UNNECESSARY_FILES)

    def apply(self, tree: ProjectTree, ctx: StepContext) -> str:
        deleted = operations.remove_unnecessary_files(tree, self.paths)
        return f"deleted {len(deleted)} file(s)"


Step = Annotated[
    Union[
        ReplaceContentStep,
        LiteralReplaceStep,
        RegexReplaceStep,
        DeleteFilesStep,
        UpdateManifestStep,
        MovePackageStep,
        RenameClassStep,
        RenderTemplateStep,
        CleanReadmeStep,
        CleanChangelogStep,
        UpdateCiConfigStep,
        RemoveUnnecessaryFilesStep,
    ],
    Field(discriminator="op"),
]


# ═══════════════════════════════════════════════════════════════════════════
# COMPLETE RECIPE
# ═══════════════════════════════════════════════════════════════════════════


def _render_value(value: Any, context: dict[str, Any]) -> Any:
    if isinstance(value, str):
        return render_string(value, context)
    if isinstance(value, list):
        return [_render_value(v, context) for v in value]
    if isinstance(value, dict):
        return {k: _render_value(v, context) for k, v in value.items()}
    return value


class Recipe(BaseModel):
    """Complete Lathe recipe"""

    recipe_version: str = Field("1.0", alias="recipeVersion")
    name: str
    description: str = ""
    parameters: dict[str, Any] = {}
    steps: list[Step]

    model_config = {"populate_by_name": True}

    @classmethod
    def from_yaml(cls, yaml_content: str) -> "Recipe":
        """Parse YAML content into a Recipe"""
        import yaml

        try:
            data = yaml.safe_load(yaml_content)
        except yaml.YAMLError as e:
            raise RecipeError(f"Invalid YAML: {e}") from e
        if not isinstance(data, dict):
            raise RecipeError("Recipe must be a YAML mapping")
        try:
            return cls.model_validate(data)
        except ValidationError as e:
            raise RecipeError(str(e)) from e

    @classmethod
    def from_file(cls, path: str | Path) -> "Recipe":
        """Load a recipe from a YAML file"""
        content = Path(path).read_text(encoding="utf-8")
        return cls.from_yaml(content)

    def to_yaml(self) -> str:
        """Export the recipe to YAML"""
        import yaml

        return yaml.safe_dump(
            self.model_dump(by_alias=True, exclude_none=True),
            default_flow_style=False,
            sort_keys=False,
        )

    def render(self, overrides: dict[str, Any] | None = None) -> "Recipe":
        """
        Resolve parameter references in the name and every step.

        Parameters are rendered in declaration order, so a parameter may
        refer to the ones above it. ``overrides`` replace declared values.
        Every string is a template, file text and regex patterns included;
        wrap literal ``{{ ... }}`` (GitHub Actions ``${{ ... }}``, say) in
        ``{% raw %}...{% endraw %}``.

        Raises:
            RecipeError: if a reference is undefined or the result is invalid
        """
        context: dict[str, Any] = {}
        for key, value in {**self.parameters, **(overrides or {})}.items():
            context[key] = _render_value(value, context)

        data = self.model_dump(by_alias=True)
        data["parameters"] = context
        data["name"] = render_string(data["name"], context)
        data["description"] = render_string(data["description"], context)
        data["steps"] = _render_value(data["steps"], context)
        try:
            return Recipe.model_validate(data)
        except ValidationError as e:
            raise RecipeError(str(e)) from e
