# Services package.
#
#   comment_service  -- CommentStore: validated create / get / list / delete
#                       for the comments table, one transaction per write.
#
# The store owns its transaction boundaries: it is built around a session
# factory (see ``comment_board.database.Database``) rather than receiving a
# session from the router layer.
