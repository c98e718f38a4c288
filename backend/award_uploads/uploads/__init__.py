"""Award image upload module.

This module stages uploaded award images, persists them either on local disk
or through a registered remote image capability, and keeps the latest upload
per award entity in memory so that a later replace call can find it.

Supported flow:
- POST an image with the entity id in a header → staged → persisted
- replace: delete the previous image (local only) and forget the upload

Uploads are tracked for the lifetime of the process only.
"""
