import sys

from vela.vela_repl import main

sys.exit(main())
