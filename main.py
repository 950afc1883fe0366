from __future__ import annotations

from graph_user_admin.cli import main

if __name__ == "__main__":
    main()
