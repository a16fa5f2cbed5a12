from shellrelay.cli import main

raise SystemExit(main())
