from subchain.cli.main import main

main()
