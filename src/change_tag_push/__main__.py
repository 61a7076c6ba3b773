from change_tag_push.cli.app import main

main()
