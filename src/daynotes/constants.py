# SPDX-License-Identifier: GPL-3.0-or-later

APP_ID = 'io.github.daynotes.DayNotes'

DATA_DIR_NAME = 'daynotes'
RECORDS_FILE_NAME = 'dayRecords.json'

DATE_KEY_FORMAT = '%Y-%m-%d'

# Number of cells in the month grid (six weeks).
GRID_DAYS = 42

DEFAULT_SYNC_INTERVAL_MINUTES = 0
