from __future__ import annotations

from annostudio.core.errors import NoClassesConfiguredError
from annostudio.core.pipeline.base import StageContext
from annostudio.labels.resolver import as_catalog


class ValidateCatalog:
    """Fatal precondition: indices are meaningless without a class catalog."""
    name = "ValidateCatalog"

    def run(self, ctx: StageContext) -> None:
        catalog = as_catalog(ctx.state["catalog"])
        if len(catalog) == 0:
            raise NoClassesConfiguredError(ctx.cfg.step)
        ctx.state["catalog"] = catalog
        ctx.log("catalog", {"classes": catalog.names})
