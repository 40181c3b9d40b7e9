from typing import Any, Dict, Optional
import os

from pyaml import yaml

from readsplit.utils.log import CustomLogger, Rlogger
logger = Rlogger().get_logger()


def load_yaml(conf_fn: str) -> Dict:
    ''' Load a yaml configuration file into a dictionary
    '''
    if not os.path.exists(conf_fn):
        raise FileNotFoundError(f"Configuration file not found: {conf_fn}")

    with open(conf_fn) as fh:
        conf_dict = yaml.load(fh, Loader=yaml.FullLoader)

    if conf_dict is None:
        return {}
    if not isinstance(conf_dict, dict):
        raise ValueError(f"Configuration file {conf_fn} must contain a mapping, got {type(conf_dict).__name__}")
    return conf_dict


class Xp():
    ''' Imports a yaml file into an instance of the class xp (experiment). Attributes are directly assigned via the yaml file
    '''
    consolidated: bool
    conf_fn: Optional[str]

    # Internal attributes
    logger: CustomLogger
    rlogger: Any

    # attributes that are never exported or shown
    internal_keys = ('logger', 'rlogger', 'consolidated')

    def __init__(self, conf_fn=None, conf_dict=None):
        self.conf_fn = conf_fn
        self.consolidated = False

        self.logger = Rlogger().get_logger()
        self.rlogger = Rlogger()  # Keep a reference to the Rlogger instance

        # populate the conf dir via a file or directly from an argument
        if conf_fn is not None:
            for k,v in load_yaml(conf_fn).items():
                setattr(self, k, v)
        
        if conf_dict is not None:
            for k,v in conf_dict.items():
                setattr(self, k, v)

        self.consolidate_conf()

    def __str__(self):
        return '\n'.join([f'{i}:\t{ii}' for i,ii in self.__rich_repr__()])

    def __rich_repr__(self):
        for k,v in vars(self).items():
            if k not in self.internal_keys:
                yield k,v

    def consolidate_conf(self, update=False):
        ''' Hook for subclasses to fill defaults and validate; marks the configuration as usable '''
        setattr(self, "consolidated", True)

    def update(self, **overrides):
        ''' Override attributes with the values that are not None, e.g. from command line flags
        '''
        for k,v in overrides.items():
            if v is not None:
                logger.debug(f'setting {k}\t-->\t{v}')
                setattr(self, k, v)
        self.consolidate_conf(update=True)
                            
    def logger_set_level(self, level):
        '''
        '''
        self.rlogger.set_level(level)

    def to_dict(self) -> Dict[str, Any]:
        return {k: v for k,v in self.__rich_repr__()}

    def export_xpconf(self, out_fn, xp_conf_keys = None):
        ''' Saves the current configuration to ``out_fn``
        '''
        logger.io(f'Saving xp conf to {out_fn}')

        if xp_conf_keys is None:
            xp_conf_keys = self.to_dict().keys()

        conf_dict = dict([(i, vars(self)[i]) for i in xp_conf_keys if i not in self.internal_keys])
    
        with open(out_fn, 'w') as outfile:
            yaml.dump(conf_dict, outfile)
