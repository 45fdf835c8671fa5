import os

import click
from flask.cli import with_appcontext

from . import db
from .dedup import file_hash, payload_hash, sha256_hex
from .models import AdReceipt
from .storage import stored_path


@click.command("backfill-hashes")
@with_appcontext
def backfill_hashes():
    """Fill file_hash / qr_hash on receipts recorded before dedup existed."""
    rows = AdReceipt.query.filter(
        db.or_(AdReceipt.file_hash.is_(None), AdReceipt.qr_hash.is_(None))
    ).all()
    click.echo(f"Need backfill: {len(rows)}")
    for r in rows:
        if r.file_hash is None:
            path = stored_path(r.receipt_url)
            if path and os.path.exists(path):
                with open(path, "rb") as f:
                    r.file_hash = file_hash(f.read())
            else:
                r.file_hash = sha256_hex(str(r.id))
        if r.qr_hash is None:
            r.qr_hash = payload_hash(r.qr_code_data)
    db.session.commit()
    click.echo("Backfill done.")
