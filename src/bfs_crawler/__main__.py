from bfs_crawler.cli import main

raise SystemExit(main())
