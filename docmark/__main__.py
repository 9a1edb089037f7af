from docmark.cli import main

raise SystemExit(main())
