from descry.cli.main import main

main()
