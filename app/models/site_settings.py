from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class SiteSettings:
    site_name: str = "EduHub"
    site_description: str = "Learn new skills online with expert-led courses."
    contact_email: str = "support@eduhub.com"
    enable_registration: bool = True
    maintenance_mode: bool = False
