from greeting_counter.main import main

main()
