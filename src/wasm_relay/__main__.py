from wasm_relay.cli import main

main()
