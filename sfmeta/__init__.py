# ==============================================
# sfmeta: Metadata API client
# ==============================================
#
# Package Structure:
#
# sfmeta/
# ├── connection/       # Session handle (instance URL + session id)
# ├── metadata/         # SOAP codec, MetadataClient, async jobs
# ├── config.py         # Configuration management
# ├── errors.py         # Exception hierarchy
# └── cli.py            # Command line entry point
#
# ==============================================

__version__ = "0.1.0"
