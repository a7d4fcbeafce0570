# =============================================================================
# Storage Module
# =============================================================================
# Local persistence for message templates (JSON in the config directory).
# =============================================================================

from mini_mailer.storage.templates import Template, TemplateError, TemplateStore

__all__ = ["Template", "TemplateStore", "TemplateError"]
