from rtmap.cli.app import main

main()
