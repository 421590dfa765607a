from smallbank_workload.main import main

main()
