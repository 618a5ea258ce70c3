"""
RegenerationOptions - What to regenerate, and how.
"""

from dataclasses import dataclass, asdict
from typing import List, Optional

from .errors import ValidationError
from .record_store import RecordId


# Validation rule names
RULE_SCOPE = 'scope'
RULE_MODEL_AND_BLOCK_TYPE = 'model_and_block_type'
RULE_ID_SELECTOR = 'id_requires_selector'
RULE_MULTIPLE_TYPES = 'multiple_type_flags'
RULE_QUIET_VERBOSE = 'quiet_and_verbose'


@dataclass
class RegenerationOptions:
    """
    Regeneration scope, filters and flags.

    Attributes:
        all: Scan models, blocks and SEO entries
        models: Scan all models
        blocks: Scan all blocks
        seo: Scan all SEO entries
        model: Only this model type (implies models)
        block_type: Only this block type (implies blocks)
        field: Only fields with this exact name
        id: Only this record, block or SEO id
        conversion: Only manifests whose preset contains this substring
        disk: Only references stored on this disk
        dry_run: Report what would be regenerated without touching anything
        force: Skip the confirmation prompt
        backup: Copy current derivatives to timestamped backups first
        keep_on_fail: Keep existing derivatives when regeneration fails
        verbose: Show per-image results and failure details
        quiet: Only show errors
        json: Print results as JSON
    """
    all: bool = False
    models: bool = False
    blocks: bool = False
    seo: bool = False
    model: Optional[str] = None
    block_type: Optional[str] = None
    field: Optional[str] = None
    id: Optional[RecordId] = None
    conversion: Optional[str] = None
    disk: Optional[str] = None
    dry_run: bool = False
    force: bool = False
    backup: bool = False
    keep_on_fail: bool = True
    verbose: bool = False
    quiet: bool = False
    json: bool = False

    @property
    def should_scan_models(self) -> bool:
        return self.all or self.models or self.model is not None

    @property
    def should_scan_blocks(self) -> bool:
        return self.all or self.blocks or self.block_type is not None

    @property
    def should_scan_seo(self) -> bool:
        return self.all or self.seo

    @property
    def has_model_filter(self) -> bool:
        return self.model is not None

    @property
    def has_block_type_filter(self) -> bool:
        return self.block_type is not None

    @property
    def has_field_filter(self) -> bool:
        return self.field is not None

    @property
    def has_id_filter(self) -> bool:
        return self.id is not None

    @property
    def has_conversion_filter(self) -> bool:
        return self.conversion is not None

    @property
    def has_disk_filter(self) -> bool:
        return self.disk is not None

    def validate(self) -> List[ValidationError]:
        """
        Check every option rule.

        Returns:
            One ValidationError per violated rule (empty when valid)
        """
        errors = []

        if not (self.should_scan_models or self.should_scan_blocks or self.should_scan_seo):
            errors.append(ValidationError(
                RULE_SCOPE,
                'Must specify --all, --models, --blocks, --seo, --model, or --block-type',
            ))

        if self.model is not None and self.block_type is not None:
            errors.append(ValidationError(
                RULE_MODEL_AND_BLOCK_TYPE,
                'Cannot specify both --model and --block-type',
            ))

        if self.has_id_filter and self.model is None and self.block_type is None and not self.seo:
            errors.append(ValidationError(
                RULE_ID_SELECTOR,
                '--id requires --model, --block-type, or --seo',
            ))

        if sum([self.models, self.blocks, self.seo]) > 1:
            errors.append(ValidationError(
                RULE_MULTIPLE_TYPES,
                'Cannot specify multiple type flags together (use --all instead)',
            ))

        if self.quiet and self.verbose:
            errors.append(ValidationError(
                RULE_QUIET_VERBOSE,
                'Cannot specify both --quiet and --verbose',
            ))

        return errors

    def describe(self) -> str:
        """Human-readable description of the selected images."""
        parts = []

        if self.all:
            parts.append('all images')
        else:
            if self.model:
                parts.append(f"model: {self.model}")
            elif self.models:
                parts.append('all models')

            if self.block_type:
                parts.append(f"block type: {self.block_type}")
            elif self.blocks:
                parts.append('all blocks')

            if self.seo:
                parts.append('all SEO images')

        if self.field:
            parts.append(f"field: {self.field}")
        if self.has_id_filter:
            parts.append(f"ID: {self.id}")
        if self.conversion:
            parts.append(f"conversion: {self.conversion}")
        if self.disk:
            parts.append(f"disk: {self.disk}")

        return ', '.join(parts)

    def to_dict(self) -> dict:
        return asdict(self)
