from markprint.main import main

main()
