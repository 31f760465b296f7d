from depsupdater.cli import main

main()
