"""
blobdav: browse and edit a flat object store as if it were a filesystem.
"""

VERSION = "1.01"
