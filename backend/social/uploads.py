"""
Upload storage for post images.

Files go through Django's default storage (MEDIA_ROOT = UPLOAD_DEST).
Only the generated filename is returned; Post.image stores it verbatim.
"""

import os
import random
import time

from django.core.files.storage import default_storage

ALLOWED_IMAGE_EXTENSIONS = ('.jpg', '.jpeg', '.png', '.gif')
MAX_UPLOAD_SIZE = 5 * 1024 * 1024


def generate_filename(original_name: str) -> str:
    """<epoch-ms>-<random 9 digits><original extension>"""
    _, ext = os.path.splitext(original_name)
    return f"{int(time.time() * 1000)}-{random.randint(0, 10**9)}{ext.lower()}"


def save_upload(uploaded_file) -> dict:
    filename = default_storage.save(generate_filename(uploaded_file.name), uploaded_file)
    return {
        'filename': filename,
        'url': default_storage.url(filename),
    }
