from cep_race.cli import main

raise SystemExit(main())
