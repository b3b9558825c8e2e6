from ftrelease.cli.app import main

main()
