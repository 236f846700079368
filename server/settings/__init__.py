"""Main settings file.

Settings are split into components and put together here with
``django-split-settings``. Values come from the environment or from
``config/.env`` through ``python-decouple``.
"""

from split_settings.tools import include

include(
    'components/common.py',
    'components/logging.py',
    'components/storages.py',
    'components/files.py',
)
