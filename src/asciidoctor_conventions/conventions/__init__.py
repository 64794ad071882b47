"""Documentation conventions layered on the Asciidoctor render plugin."""

from __future__ import annotations

from .attributes import (
    DOCUMENT_OPTIONS,
    HTML_STYLESHEET,
    AttributeSet,
    common_attributes,
    compose_attributes,
    html_only_attributes,
)
from .config import (
    CONFIG_FILENAME,
    ConfigOverrides,
    ConventionSettings,
    ConventionsConfigError,
    LoadResult,
    load_config,
)
from .descriptor import (
    DESCRIPTOR_FILENAME,
    DescriptorError,
    ProjectDescriptor,
    TaskDescriptor,
    build_project,
    load_descriptor,
)
from .plugin import (
    ASSET_PATTERNS,
    CONVENTIONS_PLUGIN_ID,
    EXTENSIONS_CONFIGURATION,
    AsciidoctorConventionPlugin,
    JobConventions,
    job_conventions,
)
from .resources import (
    DEFAULT_RESOURCES_COORDINATE,
    RESOURCES_CONFIGURATION,
    UNZIP_TASK_NAME,
    create_unzip_documentation_resources_task,
)
from .staging import (
    SYNC_TASK_PREFIX,
    StagingPlan,
    create_sync_documentation_source_task,
    plan_staging,
    sync_task_name,
)

__all__ = [
    "DOCUMENT_OPTIONS",
    "HTML_STYLESHEET",
    "AttributeSet",
    "common_attributes",
    "compose_attributes",
    "html_only_attributes",
    "CONFIG_FILENAME",
    "ConfigOverrides",
    "ConventionSettings",
    "ConventionsConfigError",
    "LoadResult",
    "load_config",
    "DESCRIPTOR_FILENAME",
    "DescriptorError",
    "ProjectDescriptor",
    "TaskDescriptor",
    "build_project",
    "load_descriptor",
    "ASSET_PATTERNS",
    "CONVENTIONS_PLUGIN_ID",
    "EXTENSIONS_CONFIGURATION",
    "AsciidoctorConventionPlugin",
    "JobConventions",
    "job_conventions",
    "DEFAULT_RESOURCES_COORDINATE",
    "RESOURCES_CONFIGURATION",
    "UNZIP_TASK_NAME",
    "create_unzip_documentation_resources_task",
    "SYNC_TASK_PREFIX",
    "StagingPlan",
    "create_sync_documentation_source_task",
    "plan_staging",
    "sync_task_name",
]
