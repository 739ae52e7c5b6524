#! /usr/bin/env python
"""Viewer for the retained-memory dominator tree of a Ruby heap dump"""
import wx, sys, logging
from gettext import gettext as _
from squaremap import squaremap
from reap import heaploader, dominators
from reap.heapadapter import HeapAdapter
from reap.records import MalformedRecord

log = logging.getLogger(__name__)

ID_PERCENTAGE_VIEW = wx.NewIdRef()
ID_ROOT_VIEW = wx.NewIdRef()


class MainFrame(wx.Frame):
    """The root frame for the display of a single heap dump"""
    adapter = None
    percentageView = False

    def __init__(
        self, parent=None, id=-1,
        title=_("Reap"),
        pos=wx.DefaultPosition,
        size=wx.DefaultSize,
        style=wx.DEFAULT_FRAME_STYLE | wx.CLIP_CHILDREN,
        name=_("Reap"),
    ):
        wx.Frame.__init__(self, parent, id, title, pos, size, style, name)
        self.CreateControls()

    def CreateControls(self):
        """Create our sub-controls"""
        self.CreateMenuBar()
        self.CreateStatusBar()
        self.squareMap = squaremap.SquareMap(
            self,
            padding=6,
            labels=True,
            square_style=True,
        )
        squaremap.EVT_SQUARE_HIGHLIGHTED(self.squareMap, self.OnSquareHighlighted)
        squaremap.EVT_SQUARE_ACTIVATED(self.squareMap, self.OnNodeActivated)
        self.Maximize(True)

    def CreateMenuBar(self):
        """Create our menu-bar for triggering operations"""
        menubar = wx.MenuBar()
        menu = wx.Menu()
        menu.Append(wx.ID_OPEN, _('&Open Heap Dump'), _('Open a Ruby heap dump file'))
        menu.AppendSeparator()
        menu.Append(wx.ID_EXIT, _('&Close'), _('Close this Reap window'))
        menubar.Append(menu, _('&File'))
        menu = wx.Menu()
        self.percentageMenuItem = menu.AppendCheckItem(
            ID_PERCENTAGE_VIEW, _('&Percentage View'),
            _('View retained memory as percent of the whole dump')
        )
        menu.Append(ID_ROOT_VIEW, _('&Root View (Home)'), _('View the root of the tree'))
        menubar.Append(menu, _('&View'))
        self.SetMenuBar(menubar)

        self.Bind(wx.EVT_MENU, lambda evt: self.Close(True), id=wx.ID_EXIT)
        self.Bind(wx.EVT_MENU, self.OnOpenFile, id=wx.ID_OPEN)
        self.Bind(wx.EVT_MENU, self.OnPercentageView, id=ID_PERCENTAGE_VIEW)
        self.Bind(wx.EVT_MENU, self.OnRootView, id=ID_ROOT_VIEW)

    def OnOpenFile(self, event):
        """Request to open a new heap dump"""
        dialog = wx.FileDialog(self, style=wx.FD_OPEN)
        if dialog.ShowModal() == wx.ID_OK:
            self.load_memory(dialog.GetPath())

    def OnPercentageView(self, event):
        """Toggle display of retained sizes as percentages of the root"""
        self.percentageView = not self.percentageView
        self.percentageMenuItem.Check(self.percentageView)
        if self.adapter:
            self.adapter.SetPercentage(self.percentageView, self.adapter.overall(self.graph.root))
            self.squareMap.Refresh()

    def OnRootView(self, event):
        if self.adapter:
            self.squareMap.SetModel(self.graph.root, self.adapter)

    def OnSquareHighlighted(self, event):
        if event.node is not None:
            self.SetStatusText(self.adapter.label(event.node))

    def OnNodeActivated(self, event):
        self.squareMap.SetModel(event.node, self.adapter)

    def load_memory(self, filename):
        """Load a heap dump and display its dominator tree"""
        wx.BeginBusyCursor()
        try:
            try:
                graph = heaploader.load(filename)
            except (MalformedRecord, OSError) as err:
                log.error('Unable to load %s: %s', filename, err)
                wx.MessageBox(str(err), _('Unable to load heap dump'), wx.OK | wx.ICON_ERROR)
                return
            tree = dominators.DominatorTree(graph)
            retained = dominators.retained_stats(graph, tree)
            self.graph = graph
            self.adapter = HeapAdapter(graph, tree, retained)
            self.adapter.SetPercentage(self.percentageView, retained[graph.root].bytes)
            self.squareMap.SetModel(graph.root, self.adapter)
            self.SetTitle(_('Reap: %s') % (filename,))
        finally:
            wx.EndBusyCursor()


class HeapViewApp(wx.App):
    def OnInit(self):
        """Initialise the application"""
        frame = MainFrame()
        frame.Show(True)
        self.SetTopWindow(frame)
        if sys.argv[1:]:
            wx.CallAfter(frame.load_memory, sys.argv[1])
        else:
            log.warning('No heap dump file specified')
        return True


def main():
    """Mainloop for the application"""
    logging.basicConfig(level=logging.INFO)
    app = HeapViewApp(0)
    app.MainLoop()


if __name__ == "__main__":
    main()
