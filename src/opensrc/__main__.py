from opensrc.cli import main

main()
