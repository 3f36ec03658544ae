"""
CSV export of a user's contacts.
"""

from __future__ import annotations

import csv
import io
from typing import Iterable

from contacthub.db import ContactRecord

EXPORT_FIELDS = ("name", "email", "tags")
EXPORT_FILENAME = "contacts.csv"


def contacts_to_csv(contacts: Iterable[ContactRecord]) -> str:
    """Render one row per contact; tags are joined into a single field."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(EXPORT_FIELDS)
    for contact in contacts:
        writer.writerow([contact.name, contact.email, ",".join(contact.tags)])
    return buffer.getvalue()
