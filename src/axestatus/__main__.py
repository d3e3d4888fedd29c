from axestatus.cli.main import main

main()
