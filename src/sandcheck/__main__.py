from sandcheck.cli import main

main()
