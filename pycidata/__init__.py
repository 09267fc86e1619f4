"""
PyCidata is a pure python library to create (master) and parse the small
ISO9660 seed images used by the cloud-init NoCloud datasource.
"""
from .pycidata import PyCidata, make_cloud_init_iso  # NOQA
