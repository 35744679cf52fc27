from .web import main

raise SystemExit(main())
