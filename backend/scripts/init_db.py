"""
Crée les tables et, si demandé, le premier administrateur.
Usage : python scripts/init_db.py --admin-email admin@ecole.be --admin-password secret
"""

import argparse
import sys
from pathlib import Path

BACKEND_ROOT = Path(__file__).resolve().parents[1]
if str(BACKEND_ROOT) not in sys.path:
    sys.path.insert(0, str(BACKEND_ROOT))

from app.bootstrap import create_tables, ensure_admin  # noqa: E402
from app.database import SessionLocal, engine  # noqa: E402
from app.exceptions import ServiceError  # noqa: E402


def main() -> None:
    parser = argparse.ArgumentParser(description="Initialise la base de données des présences.")
    parser.add_argument("--admin-email")
    parser.add_argument("--admin-password")
    parser.add_argument("--admin-name", default="Administrateur")
    args = parser.parse_args()

    tables = create_tables(engine)
    print(f"OK: tables créées ({', '.join(tables)})")

    if args.admin_email:
        if not args.admin_password:
            parser.error("--admin-password est obligatoire avec --admin-email")
        db = SessionLocal()
        try:
            admin_id = ensure_admin(db, args.admin_email, args.admin_password, args.admin_name)
        except ServiceError as e:
            parser.error(str(e))
        finally:
            db.close()
        print(f"OK: administrateur {args.admin_email} ({admin_id})")


if __name__ == "__main__":
    main()
