from rsd.cli import main

raise SystemExit(main())
