from dyntemplate.cli import main

main()
