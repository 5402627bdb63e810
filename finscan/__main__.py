from finscan.cli import main

raise SystemExit(main())
