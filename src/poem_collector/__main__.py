from poem_collector.main import main

raise SystemExit(main())
