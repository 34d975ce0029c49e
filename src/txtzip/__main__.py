from txtzip.cli import main

raise SystemExit(main())
