"""Post-install verifier — re-reads disk and override state.

Findings are returned as warnings; by this point the install has been
committed and nothing is rolled back.
"""

from __future__ import annotations

import logging

from flatvine.core.sandbox import FlatpakOverrides
from flatvine.models.config import LIBRARY_NAME, MANIFEST_NAME, InstallConfig
from flatvine.models.reports import VerificationReport, VerificationWarning

logger = logging.getLogger(__name__)


class PostInstallVerifier:
    def __init__(self, config: InstallConfig, overrides: FlatpakOverrides) -> None:
        self.config = config
        self.overrides = overrides

    def verify(self) -> VerificationReport:
        warnings: list[VerificationWarning] = []

        base = self.config.install_base
        files_present = all(
            (base / name).is_file() for name in (LIBRARY_NAME, MANIFEST_NAME)
        )
        if not files_present:
            warnings.append(VerificationWarning(
                check_id="files_present",
                message="Some installed files may be missing",
            ))

        override_visible = self.config.gmp_env_var in self.overrides.show()
        if not override_visible:
            warnings.append(VerificationWarning(
                check_id="override_visible",
                message="Flatpak override may not be set correctly",
            ))

        for w in warnings:
            logger.warning("verification: %s", w.message)
        return VerificationReport(
            files_present=files_present,
            override_visible=override_visible,
            warnings=warnings,
        )
