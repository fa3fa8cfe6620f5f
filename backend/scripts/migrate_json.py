# backend/scripts/migrate_json.py
# Usage: python backend/scripts/migrate_json.py --data-dir server/data --backup-dir server/data/backup
import sys

from healthlog.migration import main

if __name__ == "__main__":
    sys.exit(main())
